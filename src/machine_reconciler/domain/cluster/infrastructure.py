"""Cluster infrastructure configuration schema.

Only the AWS resource tag lists are modelled; every other field of the
infrastructure resource is accepted and ignored.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _InfraModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AWSResourceTag(_InfraModel):
    """User-defined tag applied to AWS resources of the cluster."""
    key: str
    value: str = ""


class AWSPlatformSpec(_InfraModel):
    resource_tags: List[AWSResourceTag] = Field(default_factory=list)


class AWSPlatformStatus(_InfraModel):
    region: str = ""
    resource_tags: List[AWSResourceTag] = Field(default_factory=list)


class PlatformSpec(_InfraModel):
    aws: Optional[AWSPlatformSpec] = None


class PlatformStatus(_InfraModel):
    aws: Optional[AWSPlatformStatus] = None


class InfrastructureSpec(_InfraModel):
    platform_spec: PlatformSpec = Field(default_factory=PlatformSpec)


class InfrastructureStatus(_InfraModel):
    infrastructure_name: str = ""
    platform_status: Optional[PlatformStatus] = None


class Infrastructure(_InfraModel):
    """Infrastructure resource; the spec is authoritative, the status informational."""
    spec: InfrastructureSpec = Field(default_factory=InfrastructureSpec)
    status: InfrastructureStatus = Field(default_factory=InfrastructureStatus)

    def spec_resource_tags(self) -> List[AWSResourceTag]:
        if self.spec.platform_spec.aws is None:
            return []
        return self.spec.platform_spec.aws.resource_tags

    def status_resource_tags(self) -> List[AWSResourceTag]:
        platform_status = self.status.platform_status
        if platform_status is None or platform_status.aws is None:
            return []
        return platform_status.aws.resource_tags
