"""Tests for environment variable expansion utilities."""

import os
from unittest.mock import patch

from machine_reconciler.config.env_expansion import expand_env_vars


class TestEnvironmentVariableExpansion:
    """Test environment variable expansion functionality."""

    def test_expand_simple_env_var(self):
        """Test expansion of simple environment variable."""
        with patch.dict(os.environ, {"TEST_VAR": "/test/path"}):
            assert expand_env_vars("$TEST_VAR") == "/test/path"

    def test_expand_braced_env_var_with_subpath(self):
        """Test expansion of braced environment variable with subpath."""
        with patch.dict(os.environ, {"TEST_VAR": "/test/path"}):
            assert expand_env_vars("${TEST_VAR}/subdir") == "/test/path/subdir"

    def test_default_is_used_when_unset(self):
        """Test ${VAR:default} falls back to the default."""
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars("${AWS_REGION:us-east-1}") == "us-east-1"

    def test_empty_default(self):
        """Test ${VAR:} expands to an empty string."""
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars("${AWS_PROFILE:}") == ""

    def test_set_variable_wins_over_default(self):
        """Test a set variable takes precedence over the default."""
        with patch.dict(os.environ, {"AWS_REGION": "eu-west-1"}):
            assert expand_env_vars("${AWS_REGION:us-east-1}") == "eu-west-1"

    def test_expand_nonexistent_env_var(self):
        """Test expansion of non-existent environment variable."""
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars("$NONEXISTENT_VAR") == "$NONEXISTENT_VAR"
            assert expand_env_vars("${NONEXISTENT_VAR}") == "${NONEXISTENT_VAR}"

    def test_expand_nested_values(self):
        """Test expansion inside nested dictionaries and lists."""
        with patch.dict(os.environ, {"TEST_VAR": "/test/path"}):
            config = {
                "logging": {"file_path": "$TEST_VAR/app.log", "max_size_mb": 10},
                "domains": ["${TEST_VAR}", "plain"],
            }
            assert expand_env_vars(config) == {
                "logging": {"file_path": "/test/path/app.log", "max_size_mb": 10},
                "domains": ["/test/path", "plain"],
            }

    def test_non_string_values_are_untouched(self):
        """Test non-string scalars pass through."""
        assert expand_env_vars(42) == 42
        assert expand_env_vars(None) is None
        assert expand_env_vars(True) is True
