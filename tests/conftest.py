import pytest
from unittest.mock import Mock
from typing import Any, Dict, List, Optional
from moto import mock_aws

from machine_reconciler.config.schemas import AWSProviderConfig
from machine_reconciler.domain.machine.machine_aggregate import MACHINE_CLUSTER_ID_LABEL, Machine
from machine_reconciler.providers.aws.domain.instance import Ec2Instance
from machine_reconciler.providers.aws.infrastructure.aws_client import AWSClient

CLUSTER_ID = "cluster-1"
MACHINE_NAME = "cluster-1-worker-a-x7k2p"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def machine():
    return Machine(name=MACHINE_NAME, labels={MACHINE_CLUSTER_ID_LABEL: CLUSTER_ID})


@pytest.fixture
def mock_aws_client():
    """AWSClient double for tests that only check which API calls are issued."""
    return Mock(spec=AWSClient)


@pytest.fixture
def aws_client():
    """AWSClient backed by moto."""
    with mock_aws():
        yield AWSClient(AWSProviderConfig(region='us-east-1', request_retry_attempts=1))


@pytest.fixture
def ami_id(aws_client):
    """An AMI registered in moto's default image catalogue."""
    images = aws_client.ec2_client.describe_images()['Images']
    return images[0]['ImageId'] if images else 'ami-12c6146b'


@pytest.fixture
def launch_instance(aws_client, ami_id):
    """Launch a moto instance with the given tags and return its id."""
    def _launch(tags: Optional[Dict[str, str]] = None) -> str:
        params: Dict[str, Any] = {
            'ImageId': ami_id,
            'InstanceType': 't3.medium',
            'MinCount': 1,
            'MaxCount': 1,
        }
        if tags:
            params['TagSpecifications'] = [{
                'ResourceType': 'instance',
                'Tags': [{'Key': k, 'Value': v} for k, v in tags.items()],
            }]
        response = aws_client.ec2_client.run_instances(**params)
        return response['Instances'][0]['InstanceId']
    return _launch


@pytest.fixture
def instance_data():
    """Build a describe-instances entry."""
    def _build(
        instance_id: str = 'i-0123456789abcdef0',
        state: Optional[str] = 'running',
        tags: Optional[Dict[str, str]] = None,
        private_ip: Optional[str] = '10.0.0.1',
        public_ip: Optional[str] = None,
        private_dns: Optional[str] = 'ip-10-0-0-1.ec2.internal',
        public_dns: Optional[str] = None,
        network_interfaces: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        data: Dict[str, Any] = {'InstanceId': instance_id}
        if state is not None:
            data['State'] = {'Name': state}
        if tags:
            data['Tags'] = [{'Key': k, 'Value': v} for k, v in tags.items()]
        if private_ip:
            data['PrivateIpAddress'] = private_ip
        if public_ip:
            data['PublicIpAddress'] = public_ip
        if private_dns:
            data['PrivateDnsName'] = private_dns
        if public_dns:
            data['PublicDnsName'] = public_dns
        if network_interfaces is None and private_ip:
            network_interfaces = [{
                'Status': 'in-use',
                'PrivateIpAddresses': [{'PrivateIpAddress': private_ip}],
            }]
        data['NetworkInterfaces'] = network_interfaces or []
        return data
    return _build


@pytest.fixture
def make_instance(instance_data):
    """Build an Ec2Instance from describe-instances style arguments."""
    def _build(**kwargs) -> Ec2Instance:
        return Ec2Instance.from_aws_format(instance_data(**kwargs))
    return _build
