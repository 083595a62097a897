"""Tests for classic and network load balancer registration."""
import pytest

from machine_reconciler.providers.aws.domain.machine.provider_config import (
    LoadBalancerReference,
    LoadBalancerType,
)
from machine_reconciler.providers.aws.exceptions.aws_exceptions import (
    AggregateError,
    AWSEntityNotFoundError,
    AWSInfrastructureError,
    AWSPermissionError,
    MalformedInstanceError,
)
from machine_reconciler.providers.aws.utilities.load_balancers import (
    deregister_network_load_balancers,
    gather_load_balancer_target_groups,
    register_with_classic_load_balancers,
    register_with_load_balancers,
    register_with_network_load_balancers,
)

LB_ARN = "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/net/cluster-1-int/50dc6c495c0c9188"
IP_TG_ARN = "arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/cluster-1-api/73e2d6bc24d8a067"
INSTANCE_TG_ARN = "arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/cluster-1-mcs/83e2d6bc24d8a068"


def _target_group(arn, target_type):
    return {"TargetGroupArn": arn, "TargetType": target_type, "TargetGroupName": arn.split("/")[1]}


@pytest.fixture
def instance(make_instance):
    return make_instance(instance_id="i-0123456789abcdef0", private_ip="10.0.0.1")


@pytest.fixture
def elbv2_client(mock_aws_client):
    """Client resolving one load balancer with an IP and an instance target group."""
    mock_aws_client.describe_load_balancers_v2.return_value = [
        {"LoadBalancerName": "cluster-1-int", "LoadBalancerArn": LB_ARN},
    ]
    mock_aws_client.describe_target_groups.return_value = [
        _target_group(IP_TG_ARN, "ip"),
        _target_group(INSTANCE_TG_ARN, "instance"),
    ]
    return mock_aws_client


@pytest.mark.unit
class TestClassicLoadBalancers:
    """Tests for register_with_classic_load_balancers."""

    def test_registers_with_each_load_balancer(self, mock_aws_client, instance):
        register_with_classic_load_balancers(mock_aws_client, ["elb-a", "elb-b"], instance)

        assert [c.args for c in mock_aws_client.register_instances_with_load_balancer.call_args_list] == [
            ("elb-a", ["i-0123456789abcdef0"]),
            ("elb-b", ["i-0123456789abcdef0"]),
        ]

    def test_failures_are_collected(self, mock_aws_client, instance):
        not_found = AWSEntityNotFoundError("not found", error_code="LoadBalancerNotFound")
        mock_aws_client.register_instances_with_load_balancer.side_effect = [not_found, None, not_found]

        with pytest.raises(AggregateError) as exc:
            register_with_classic_load_balancers(mock_aws_client, ["elb-a", "elb-b", "elb-c"], instance)

        assert [label for label, _ in exc.value.failures] == ["elb-a", "elb-c"]
        assert mock_aws_client.register_instances_with_load_balancer.call_count == 3

    def test_missing_instance(self, mock_aws_client):
        with pytest.raises(MalformedInstanceError):
            register_with_classic_load_balancers(mock_aws_client, ["elb-a"], None)


@pytest.mark.unit
class TestNetworkLoadBalancers:
    """Tests for register_with_network_load_balancers and deregister_network_load_balancers."""

    def test_registers_by_target_type(self, elbv2_client, instance):
        register_with_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)

        assert [c.args for c in elbv2_client.register_targets.call_args_list] == [
            (IP_TG_ARN, [{"Id": "10.0.0.1"}]),
            (INSTANCE_TG_ARN, [{"Id": "i-0123456789abcdef0"}]),
        ]

    def test_unsupported_target_type_is_collected(self, elbv2_client, instance):
        elbv2_client.describe_target_groups.return_value = [
            _target_group(IP_TG_ARN, "lambda"),
            _target_group(INSTANCE_TG_ARN, "instance"),
        ]

        with pytest.raises(AggregateError) as exc:
            register_with_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)

        assert [label for label, _ in exc.value.failures] == [IP_TG_ARN]
        assert isinstance(exc.value.errors[0], ValueError)
        elbv2_client.register_targets.assert_called_once_with(INSTANCE_TG_ARN, [{"Id": "i-0123456789abcdef0"}])

    def test_registration_failures_are_collected(self, elbv2_client, instance):
        elbv2_client.register_targets.side_effect = AWSPermissionError("denied", error_code="AccessDenied")

        with pytest.raises(AggregateError) as exc:
            register_with_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)

        assert len(exc.value) == 2

    def test_resolution_failure_aborts(self, elbv2_client, instance):
        elbv2_client.describe_load_balancers_v2.side_effect = AWSEntityNotFoundError(
            "not found", error_code="LoadBalancerNotFound"
        )

        with pytest.raises(AWSEntityNotFoundError):
            register_with_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)
        elbv2_client.register_targets.assert_not_called()

    def test_deregisters_ip_target_groups_only(self, elbv2_client, instance):
        deregister_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)

        elbv2_client.deregister_targets.assert_called_once_with(IP_TG_ARN, [{"Id": "10.0.0.1"}])

    def test_deregister_without_private_ip_is_a_noop(self, elbv2_client, make_instance):
        instance = make_instance(private_ip=None)

        deregister_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)

        elbv2_client.describe_load_balancers_v2.assert_not_called()
        elbv2_client.deregister_targets.assert_not_called()

    @pytest.mark.parametrize("code", ["TargetGroupNotFound", "InvalidTarget"])
    def test_deregister_tolerates_missing_targets(self, elbv2_client, instance, code):
        elbv2_client.deregister_targets.side_effect = AWSEntityNotFoundError("gone", error_code=code)

        deregister_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)

    def test_deregister_collects_other_failures(self, elbv2_client, instance):
        elbv2_client.deregister_targets.side_effect = AWSInfrastructureError("boom", error_code="InternalFailure")

        with pytest.raises(AggregateError) as exc:
            deregister_network_load_balancers(elbv2_client, ["cluster-1-int"], instance)
        assert exc.value.failures[0][0] == IP_TG_ARN


@pytest.mark.unit
class TestGatherTargetGroups:
    """Tests for gather_load_balancer_target_groups."""

    def test_no_names_means_no_call(self, mock_aws_client):
        assert gather_load_balancer_target_groups(mock_aws_client, []) == []
        mock_aws_client.describe_load_balancers_v2.assert_not_called()

    def test_shared_target_groups_are_returned_once(self, elbv2_client):
        elbv2_client.describe_load_balancers_v2.return_value = [
            {"LoadBalancerName": "cluster-1-int", "LoadBalancerArn": LB_ARN},
            {"LoadBalancerName": "cluster-1-ext", "LoadBalancerArn": LB_ARN + "-ext"},
        ]

        target_groups = gather_load_balancer_target_groups(elbv2_client, ["cluster-1-int", "cluster-1-ext"])

        assert [tg.arn for tg in target_groups] == [IP_TG_ARN, INSTANCE_TG_ARN]
        assert elbv2_client.describe_target_groups.call_count == 2

    def test_target_group_failure_propagates(self, elbv2_client):
        elbv2_client.describe_target_groups.side_effect = AWSPermissionError("denied")

        with pytest.raises(AWSPermissionError):
            gather_load_balancer_target_groups(elbv2_client, ["cluster-1-int"])


@pytest.mark.unit
class TestRegisterWithLoadBalancers:
    """Tests for register_with_load_balancers."""

    def test_dispatches_by_type(self, elbv2_client, instance):
        load_balancers = [
            LoadBalancerReference(name="legacy-elb", type=LoadBalancerType.CLASSIC),
            LoadBalancerReference(name="cluster-1-int", type=LoadBalancerType.NETWORK),
        ]

        register_with_load_balancers(elbv2_client, load_balancers, instance)

        elbv2_client.register_instances_with_load_balancer.assert_called_once_with(
            "legacy-elb", ["i-0123456789abcdef0"]
        )
        elbv2_client.describe_load_balancers_v2.assert_called_once_with(["cluster-1-int"])
        assert elbv2_client.register_targets.call_count == 2

    def test_no_load_balancers(self, mock_aws_client, instance):
        register_with_load_balancers(mock_aws_client, [], instance)

        mock_aws_client.register_instances_with_load_balancer.assert_not_called()
        mock_aws_client.describe_load_balancers_v2.assert_not_called()

    def test_classic_and_network_failures_are_combined(self, elbv2_client, instance):
        elbv2_client.register_instances_with_load_balancer.side_effect = AWSEntityNotFoundError(
            "missing", error_code="LoadBalancerNotFound"
        )
        elbv2_client.describe_load_balancers_v2.side_effect = AWSPermissionError("denied")
        load_balancers = [
            LoadBalancerReference(name="legacy-elb", type=LoadBalancerType.CLASSIC),
            LoadBalancerReference(name="nlb-a", type=LoadBalancerType.NETWORK),
            LoadBalancerReference(name="nlb-b", type=LoadBalancerType.NETWORK),
        ]

        with pytest.raises(AggregateError) as exc:
            register_with_load_balancers(elbv2_client, load_balancers, instance)

        assert [label for label, _ in exc.value.failures] == ["legacy-elb", "nlb-a, nlb-b"]
        assert str(exc.value).startswith("[legacy-elb: missing")
