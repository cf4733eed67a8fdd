"""S3 bucket for single-page application hosting."""

import logging
from dataclasses import dataclass, replace
from typing import Any

from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3
from constructs import Construct

from spa_deploy.config import ConfigurationError, GlobalConfig, HostedZoneConfig, SiteConfig

logger = logging.getLogger(__name__)

# Actions the deployment role needs to sync content, even under a permission boundary
ROLE_ACTIONS = (
  "s3:GetObject*",
  "s3:GetBucket*",
  "s3:List*",
  "s3:DeleteObject*",
  "s3:PutObject*",
  "s3:Abort*",
)

OPEN_PUBLIC_ACCESS = s3.BlockPublicAccess(
  block_public_acls=False,
  ignore_public_acls=False,
  block_public_policy=False,
  restrict_public_buckets=False,
)


@dataclass(frozen=True)
class PolicyStatementSpec:
  """Allow statement for any principal on the bucket, its objects, or both."""

  actions: tuple[str, ...]
  conditions: dict[str, Any]
  include_bucket: bool = False
  include_objects: bool = True


@dataclass(frozen=True)
class BucketSpec:
  """Resolved definition of the website bucket, before any construct exists."""

  index_doc: str
  error_doc: str | None = None
  public_read_access: bool = True
  encrypted: bool = False
  block_public_access: s3.BlockPublicAccess | None = None
  policy_statements: tuple[PolicyStatementSpec, ...] = ()

  def with_statement(self, statement: PolicyStatementSpec) -> "BucketSpec":
    return replace(self, policy_statements=(*self.policy_statements, statement))


def build_bucket_spec(
  global_config: GlobalConfig,
  site_config: SiteConfig | HostedZoneConfig,
  behind_cloudfront: bool,
) -> BucketSpec:
  """Derive the website bucket definition from global and per-site config.

  Raises ConfigurationError before anything is built when the IP filter is on
  for a directly served bucket but no IP list was given. A bucket behind
  CloudFront is never reached from end-user addresses, so the IP filter is
  skipped there.
  """
  if not site_config.index_doc:
    raise ConfigurationError("index_doc must be a non-empty document name")

  spec = BucketSpec(index_doc=site_config.index_doc, error_doc=site_config.error_doc)

  if global_config.encrypt_bucket:
    logger.debug("Enabling S3-managed encryption")
    spec = replace(spec, encrypted=True)

  if (
    global_config.ip_filter
    or behind_cloudfront
    or site_config.block_public_access is not None
  ):
    spec = replace(
      spec,
      public_read_access=False,
      block_public_access=site_config.block_public_access,
    )

  if global_config.ip_filter:
    if behind_cloudfront:
      logger.debug("Skipping IP filter, bucket is only reachable through CloudFront")
    else:
      if not global_config.ip_list:
        raise ConfigurationError("When ip_filter is true then ip_list is required")
      spec = spec.with_statement(
        PolicyStatementSpec(
          actions=("s3:GetObject",),
          conditions={"IpAddress": {"aws:SourceIp": list(global_config.ip_list)}},
        )
      )

  role = site_config.role or global_config.role
  if role is not None:
    logger.debug("Granting deployment role access to the website bucket")
    spec = spec.with_statement(
      PolicyStatementSpec(
        actions=ROLE_ACTIONS,
        conditions={"StringEquals": {"aws:PrincipalArn": role.role_arn}},
        include_bucket=True,
      )
    )

  return spec


class WebsiteBucket(Construct):
  """S3 bucket realized from a BucketSpec."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    spec: BucketSpec,
  ) -> None:
    super().__init__(scope, id)

    block_public_access = spec.block_public_access
    if spec.public_read_access and block_public_access is None:
      # Public bucket policies are rejected unless public access blocking is relaxed
      block_public_access = OPEN_PUBLIC_ACCESS

    self.bucket = s3.Bucket(
      self,
      "Bucket",
      website_index_document=spec.index_doc,
      website_error_document=spec.error_doc,
      public_read_access=spec.public_read_access,
      block_public_access=block_public_access,
      encryption=s3.BucketEncryption.S3_MANAGED if spec.encrypted else None,
    )

    for statement in spec.policy_statements:
      self.bucket.add_to_resource_policy(self._to_policy_statement(statement))

  def _to_policy_statement(self, statement: PolicyStatementSpec) -> iam.PolicyStatement:
    resources = []
    if statement.include_bucket:
      resources.append(self.bucket.bucket_arn)
    if statement.include_objects:
      resources.append(self.bucket.arn_for_objects("*"))

    return iam.PolicyStatement(
      actions=list(statement.actions),
      principals=[iam.AnyPrincipal()],
      resources=resources,
      conditions=statement.conditions,
    )
