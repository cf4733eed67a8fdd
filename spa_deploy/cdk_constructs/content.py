"""Website content upload, with optional CloudFront invalidation."""

from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_s3_deployment as s3_deploy
from constructs import Construct

from spa_deploy.config import ConfigurationError

S3_SCHEME = "s3://"


def parse_s3_source(uri: str) -> tuple[str, str]:
  """Split an ``s3://bucket/key.zip`` reference into bucket name and object key."""
  bucket_name, _, key = uri[len(S3_SCHEME):].partition("/")
  if not bucket_name or not key:
    raise ConfigurationError(
      f"S3 website source {uri!r} must look like s3://bucket/path/to/archive.zip"
    )
  return bucket_name, key


class WebsiteContent(Construct):
  """Uploads the website build to the bucket.

  ``website_folder`` is either a local directory, packaged as an asset, or an
  ``s3://`` reference to a zip archive.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    bucket: s3.IBucket,
    website_folder: str,
    distribution: cloudfront.IDistribution | None = None,
    distribution_paths: list[str] | None = None,
    role: iam.IRole | None = None,
    memory_limit: int | None = None,
  ) -> None:
    super().__init__(scope, id)

    self.deployment = s3_deploy.BucketDeployment(
      self,
      "BucketDeployment",
      sources=[self._source(website_folder)],
      destination_bucket=bucket,
      distribution=distribution,
      distribution_paths=distribution_paths,
      role=role,
      memory_limit=memory_limit,
    )

  def _source(self, website_folder: str) -> s3_deploy.ISource:
    if website_folder.startswith(S3_SCHEME):
      bucket_name, key = parse_s3_source(website_folder)
      source_bucket = s3.Bucket.from_bucket_name(self, "SourceBucket", bucket_name)
      return s3_deploy.Source.bucket(source_bucket, key)
    return s3_deploy.Source.asset(website_folder)


def validate_website_source(website_folder: str) -> None:
  """Reject a malformed ``s3://`` source before anything is built."""
  if website_folder.startswith(S3_SCHEME):
    parse_s3_source(website_folder)
