import pytest
from unittest.mock import Mock
from botocore.exceptions import ClientError

from machine_reconciler.config.schemas import AWSProviderConfig
from machine_reconciler.infrastructure.exceptions import InfrastructureError
from machine_reconciler.providers.aws.exceptions.aws_exceptions import (
    AWSEntityNotFoundError,
    AWSInfrastructureError,
    AWSPermissionError,
    AWSRateLimitError,
    AWSValidationError,
)
from machine_reconciler.providers.aws.infrastructure.aws_client import AWSClient


def _client_error(code, message="error", operation="TestOperation"):
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


@pytest.mark.aws
def test_describe_instances(aws_client, launch_instance):
    # Arrange
    instance_id = launch_instance({'Name': 'worker-a'})

    # Act
    reservations = aws_client.describe_instances(instance_ids=[instance_id])

    # Assert
    assert len(reservations) == 1
    instance = reservations[0]['Instances'][0]
    assert instance['InstanceId'] == instance_id
    assert instance['State']['Name'] in ['pending', 'running']


@pytest.mark.aws
def test_describe_instances_by_tag_filter(aws_client, launch_instance):
    # Arrange
    wanted = launch_instance({'Name': 'worker-a'})
    launch_instance({'Name': 'worker-b'})

    # Act
    reservations = aws_client.describe_instances(filters=[{'Name': 'tag:Name', 'Values': ['worker-a']}])

    # Assert
    ids = [i['InstanceId'] for r in reservations for i in r['Instances']]
    assert ids == [wanted]


@pytest.mark.aws
def test_describe_unknown_instance(aws_client):
    with pytest.raises(AWSEntityNotFoundError) as exc:
        aws_client.describe_instances(instance_ids=['i-00000000000000000'])

    assert exc.value.error_code == 'InvalidInstanceID.NotFound'
    assert exc.value.operation == 'DescribeInstances'


@pytest.mark.aws
def test_create_and_delete_tags(aws_client, launch_instance):
    # Arrange
    instance_id = launch_instance({'team': 'storage', 'env': 'dev'})

    # Act
    aws_client.create_tags([instance_id], [{'Key': 'env', 'Value': 'prod'}])
    aws_client.delete_tags([instance_id], [{'Key': 'team'}])

    # Assert
    instance = aws_client.describe_instances(instance_ids=[instance_id])[0]['Instances'][0]
    assert {t['Key']: t['Value'] for t in instance['Tags']} == {'env': 'prod'}


@pytest.mark.aws
def test_terminate_instances(aws_client, launch_instance):
    # Arrange
    instance_id = launch_instance()

    # Act
    result = aws_client.terminate_instances([instance_id])

    # Assert
    assert len(result) == 1
    assert result[0]['InstanceId'] == instance_id
    assert result[0]['CurrentState']['Name'] in ['shutting-down', 'terminated']


@pytest.mark.aws
def test_register_with_classic_load_balancer(aws_client, launch_instance):
    # Arrange
    instance_id = launch_instance()
    aws_client.elb_client.create_load_balancer(
        LoadBalancerName='legacy-elb',
        Listeners=[{'Protocol': 'tcp', 'LoadBalancerPort': 80, 'InstancePort': 8080}],
        AvailabilityZones=['us-east-1a'],
    )

    # Act
    aws_client.register_instances_with_load_balancer('legacy-elb', [instance_id])

    # Assert
    described = aws_client.elb_client.describe_load_balancers(LoadBalancerNames=['legacy-elb'])
    members = [i['InstanceId'] for i in described['LoadBalancerDescriptions'][0]['Instances']]
    assert members == [instance_id]


@pytest.mark.aws
def test_describe_missing_network_load_balancer(aws_client):
    with pytest.raises(AWSEntityNotFoundError) as exc:
        aws_client.describe_load_balancers_v2(['missing-nlb'])

    assert exc.value.error_code == 'LoadBalancerNotFound'
    assert exc.value.operation == 'DescribeLoadBalancers'


def test_clients_use_injected_session():
    # Arrange
    session = Mock()
    config = AWSProviderConfig(region='eu-west-1', validate_credentials=False, endpoint_url='http://localhost:4566')

    # Act
    client = AWSClient(config, session=session)

    # Assert
    services = [c.args[0] for c in session.client.call_args_list]
    assert services == ['ec2', 'elb', 'elbv2']
    _, kwargs = session.client.call_args
    assert kwargs['endpoint_url'] == 'http://localhost:4566'
    assert kwargs['config'].region_name == 'eu-west-1'
    assert client.config.retries == {'max_attempts': 3, 'mode': 'standard'}


def test_credential_validation_failure():
    # Arrange
    session = Mock()
    session.client.return_value.get_caller_identity.side_effect = _client_error('InvalidClientTokenId')

    # Act / Assert
    with pytest.raises(InfrastructureError) as exc:
        AWSClient(AWSProviderConfig(), session=session)
    assert 'Failed to validate AWS credentials' in str(exc.value)


@pytest.mark.parametrize('code,error_class', [
    ('InvalidParameterValue', AWSValidationError),
    ('ValidationError', AWSValidationError),
    ('InvalidInstanceID.NotFound', AWSEntityNotFoundError),
    ('InvalidGroup.NotFound', AWSEntityNotFoundError),
    ('TargetGroupNotFound', AWSEntityNotFoundError),
    ('InvalidTarget', AWSEntityNotFoundError),
    ('RequestLimitExceeded', AWSRateLimitError),
    ('Throttling', AWSRateLimitError),
    ('UnauthorizedOperation', AWSPermissionError),
    ('AccessDenied', AWSPermissionError),
    ('InternalError', AWSInfrastructureError),
])
def test_convert_client_error(code, error_class):
    # Act
    error = AWSClient._convert_client_error(_client_error(code, 'details'), 'RegisterTargets')

    # Assert
    assert type(error) is error_class
    assert error.error_code == code
    assert error.operation == 'RegisterTargets'
    assert str(error) == f'RegisterTargets failed: {code}: details'
