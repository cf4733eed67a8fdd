"""Tests for the website bucket definition and construct."""

import pytest
from aws_cdk import Stack
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3
from aws_cdk.assertions import Match, Template

from spa_deploy.cdk_constructs import WebsiteBucket, build_bucket_spec
from spa_deploy.cdk_constructs.storage import ROLE_ACTIONS
from spa_deploy.config import ConfigurationError, GlobalConfig, SiteConfig

SITE = SiteConfig(index_doc="index.html", website_folder="website")


class TestBuildBucketSpec:
  """Test the rules that derive a bucket definition."""

  def test_defaults_to_public_read(self) -> None:
    """Verify a plain site is publicly readable and unencrypted."""
    spec = build_bucket_spec(GlobalConfig(), SITE, behind_cloudfront=False)

    assert spec.index_doc == "index.html"
    assert spec.error_doc is None
    assert spec.public_read_access is True
    assert spec.encrypted is False
    assert spec.policy_statements == ()

  def test_encryption(self) -> None:
    """Verify encrypt_bucket marks the bucket encrypted."""
    spec = build_bucket_spec(GlobalConfig(encrypt_bucket=True), SITE, behind_cloudfront=False)

    assert spec.encrypted is True

  def test_behind_cloudfront_is_private(self) -> None:
    """Verify CloudFront-fronted buckets are never publicly readable."""
    spec = build_bucket_spec(GlobalConfig(), SITE, behind_cloudfront=True)

    assert spec.public_read_access is False

  def test_block_public_access_applied(self) -> None:
    """Verify an explicit block public access mode makes the bucket private."""
    block_all = s3.BlockPublicAccess.BLOCK_ALL
    config = SiteConfig(
      index_doc="index.html",
      website_folder="website",
      block_public_access=block_all,
    )

    spec = build_bucket_spec(GlobalConfig(), config, behind_cloudfront=False)

    assert spec.public_read_access is False
    assert spec.block_public_access is block_all

  def test_ip_filter_statement(self) -> None:
    """Verify the IP filter adds a single source-IP conditioned GetObject."""
    global_config = GlobalConfig(ip_filter=True, ip_list=["1.1.1.1", "10.0.0.0/8"])

    spec = build_bucket_spec(global_config, SITE, behind_cloudfront=False)

    assert spec.public_read_access is False
    assert len(spec.policy_statements) == 1
    statement = spec.policy_statements[0]
    assert statement.actions == ("s3:GetObject",)
    assert statement.conditions == {
      "IpAddress": {"aws:SourceIp": ["1.1.1.1", "10.0.0.0/8"]}
    }
    assert statement.include_bucket is False
    assert statement.include_objects is True

  @pytest.mark.parametrize("ip_list", [None, []])
  def test_ip_filter_without_list_fails(self, ip_list: list[str] | None) -> None:
    """Verify the IP filter needs a non-empty IP list."""
    with pytest.raises(ConfigurationError, match="ip_list is required"):
      build_bucket_spec(
        GlobalConfig(ip_filter=True, ip_list=ip_list), SITE, behind_cloudfront=False
      )

  def test_ip_filter_skipped_behind_cloudfront(self) -> None:
    """Verify the IP filter is ignored, even without a list, behind CloudFront."""
    spec = build_bucket_spec(GlobalConfig(ip_filter=True), SITE, behind_cloudfront=True)

    assert spec.public_read_access is False
    assert spec.policy_statements == ()

  def test_empty_index_doc_fails(self) -> None:
    """Verify an empty index document is rejected."""
    config = SiteConfig(index_doc="", website_folder="website")

    with pytest.raises(ConfigurationError, match="index_doc"):
      build_bucket_spec(GlobalConfig(), config, behind_cloudfront=False)

  def test_role_statement(self, stack: Stack) -> None:
    """Verify a deployment role adds one statement scoped to its ARN."""
    role = iam.Role(stack, "DeployRole", assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"))
    config = SiteConfig(index_doc="index.html", website_folder="website", role=role)

    spec = build_bucket_spec(GlobalConfig(), config, behind_cloudfront=False)

    assert spec.public_read_access is True
    assert len(spec.policy_statements) == 1
    statement = spec.policy_statements[0]
    assert statement.actions == ROLE_ACTIONS
    assert statement.conditions == {"StringEquals": {"aws:PrincipalArn": role.role_arn}}
    assert statement.include_bucket is True

  def test_global_role_used_when_site_has_none(self, stack: Stack) -> None:
    """Verify the global role is the fallback deployment role."""
    role = iam.Role(stack, "DeployRole", assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"))

    spec = build_bucket_spec(GlobalConfig(role=role), SITE, behind_cloudfront=True)

    assert len(spec.policy_statements) == 1

  def test_building_twice_is_identical(self, stack: Stack) -> None:
    """Verify identical config yields structurally identical statements."""
    role = iam.Role(stack, "DeployRole", assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"))
    global_config = GlobalConfig(ip_filter=True, ip_list=["1.1.1.1"])
    config = SiteConfig(index_doc="index.html", website_folder="website", role=role)

    first = build_bucket_spec(global_config, config, behind_cloudfront=False)
    second = build_bucket_spec(global_config, config, behind_cloudfront=False)

    assert first == second
    assert len(first.policy_statements) == 2


class TestWebsiteBucket:
  """Test the bucket construct realized from a definition."""

  def test_public_bucket(self, stack: Stack) -> None:
    """Verify a public bucket relaxes public access blocking."""
    spec = build_bucket_spec(GlobalConfig(), SITE, behind_cloudfront=False)
    WebsiteBucket(stack, "Website", spec=spec)
    template = Template.from_stack(stack)

    template.has_resource_properties(
      "AWS::S3::Bucket",
      {
        "WebsiteConfiguration": {"IndexDocument": "index.html"},
        "PublicAccessBlockConfiguration": {
          "BlockPublicAcls": False,
          "BlockPublicPolicy": False,
          "IgnorePublicAcls": False,
          "RestrictPublicBuckets": False,
        },
      },
    )

  def test_encrypted_bucket(self, stack: Stack) -> None:
    """Verify S3-managed encryption."""
    spec = build_bucket_spec(GlobalConfig(encrypt_bucket=True), SITE, behind_cloudfront=False)
    WebsiteBucket(stack, "Website", spec=spec)
    template = Template.from_stack(stack)

    template.has_resource_properties(
      "AWS::S3::Bucket",
      {
        "BucketEncryption": {
          "ServerSideEncryptionConfiguration": [
            {"ServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}
          ]
        },
      },
    )

  def test_ip_filter_policy(self, stack: Stack) -> None:
    """Verify the IP-conditioned statement reaches the bucket policy."""
    global_config = GlobalConfig(ip_filter=True, ip_list=["1.1.1.1"])
    spec = build_bucket_spec(global_config, SITE, behind_cloudfront=False)
    WebsiteBucket(stack, "Website", spec=spec)
    template = Template.from_stack(stack)

    template.has_resource_properties(
      "AWS::S3::BucketPolicy",
      {
        "PolicyDocument": {
          "Statement": [
            Match.object_like(
              {
                "Action": "s3:GetObject",
                "Condition": {"IpAddress": {"aws:SourceIp": ["1.1.1.1"]}},
                "Effect": "Allow",
              }
            )
          ],
        },
      },
    )
