"""Recipes that compose storage, CloudFront and DNS into a deployed single-page application."""

import logging
from dataclasses import dataclass

from aws_cdk import CfnOutput
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_s3 as s3
from constructs import Construct

from spa_deploy.config import (
  ConfigurationError,
  GlobalConfig,
  HostedZoneConfig,
  SiteConfig,
  resolve_global_config,
)

from .certificate import SiteCertificate
from .content import WebsiteContent, validate_website_source
from .distribution import SpaDistribution, validate_distribution_config
from .dns import HostedZoneRecords
from .storage import WebsiteBucket, build_bucket_spec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpaDeployment:
  """Resources a recipe hands back to the caller."""

  website_bucket: s3.Bucket
  distribution: cloudfront.Distribution | None = None


class SpaDeploy(Construct):
  """Deploys a single-page application to S3, optionally behind CloudFront.

  The global config is resolved once here and passed into every recipe.
  Each recipe validates its whole configuration before creating any
  resource, so a ConfigurationError never leaves a partial graph behind.

  Recipes:
  - create_basic_site: public S3 website
  - create_site_with_cloudfront: private bucket behind CloudFront
  - create_site_from_hosted_zone: CloudFront with a DNS-validated certificate,
    alias record and www redirect in an existing Route 53 zone
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    global_config: GlobalConfig | None = None,
  ) -> None:
    super().__init__(scope, id)

    self.global_config = resolve_global_config(global_config)

  def create_basic_site(self, config: SiteConfig) -> SpaDeployment:
    """Basic setup for a non-SSL, non-vanity-URL, uncached S3 website."""
    if config.export_website_url_output and not config.export_website_url_name:
      raise ConfigurationError(
        "When export_website_url_output is true then export_website_url_name is required"
      )
    validate_website_source(config.website_folder)
    spec = build_bucket_spec(self.global_config, config, behind_cloudfront=False)

    logger.info("Building basic site for %s", config.website_folder)
    website_bucket = WebsiteBucket(self, "WebsiteBucket", spec=spec)

    self._deploy_content(website_bucket.bucket, config)

    CfnOutput(
      self,
      "URL",
      description="The url of the website",
      value=website_bucket.bucket.bucket_website_url,
      export_name=(
        config.export_website_url_name if config.export_website_url_output else None
      ),
    )

    return SpaDeployment(website_bucket=website_bucket.bucket)

  def create_site_with_cloudfront(self, config: SiteConfig) -> SpaDeployment:
    """S3 site fronted by CloudFront, with unknown routes sent back to the index document."""
    validate_distribution_config(config)
    validate_website_source(config.website_folder)
    spec = build_bucket_spec(self.global_config, config, behind_cloudfront=True)

    logger.info("Building CloudFront site for %s", config.website_folder)
    website_bucket = WebsiteBucket(self, "WebsiteBucket", spec=spec)

    distribution = SpaDistribution(
      self,
      "CloudFront",
      bucket=website_bucket.bucket,
      config=config,
    )

    self._deploy_content(website_bucket.bucket, config, distribution.distribution)
    self._domain_output(distribution.distribution)

    return SpaDeployment(
      website_bucket=website_bucket.bucket,
      distribution=distribution.distribution,
    )

  def create_site_from_hosted_zone(self, config: HostedZoneConfig) -> SpaDeployment:
    """CloudFront site on a domain from an existing hosted zone."""
    validate_distribution_config(config)
    validate_website_source(config.website_folder)
    spec = build_bucket_spec(self.global_config, config, behind_cloudfront=True)

    website_bucket = WebsiteBucket(self, "WebsiteBucket", spec=spec)

    # Hosted zone lookup and certificate
    dns = HostedZoneRecords(
      self,
      "HostedZone",
      zone_name=config.zone_name,
      subdomain=config.subdomain,
    )
    logger.info("Building hosted zone site for %s", dns.domain_name)
    certificate = SiteCertificate(
      self,
      "Certificate",
      domain_name=dns.domain_name,
      hosted_zone=dns.hosted_zone,
    )

    distribution = SpaDistribution(
      self,
      "CloudFront",
      bucket=website_bucket.bucket,
      config=config,
      certificate=certificate.certificate,
      domain_name=dns.domain_name,
    )

    self._deploy_content(website_bucket.bucket, config, distribution.distribution)

    # DNS records pointing to CloudFront
    dns.create_alias_record(distribution.distribution)
    dns.create_www_redirect()

    self._domain_output(distribution.distribution)

    return SpaDeployment(
      website_bucket=website_bucket.bucket,
      distribution=distribution.distribution,
    )

  def _deploy_content(
    self,
    bucket: s3.IBucket,
    config: SiteConfig | HostedZoneConfig,
    distribution: cloudfront.IDistribution | None = None,
  ) -> WebsiteContent:
    # Invalidate / and the index document so CloudFront serves the latest build
    distribution_paths = None
    if distribution is not None:
      distribution_paths = ["/", "/" + config.index_doc]

    return WebsiteContent(
      self,
      "Content",
      bucket=bucket,
      website_folder=config.website_folder,
      distribution=distribution,
      distribution_paths=distribution_paths,
      role=config.role or self.global_config.role,
      memory_limit=config.memory_limit,
    )

  def _domain_output(self, distribution: cloudfront.IDistribution) -> None:
    CfnOutput(
      self,
      "CloudfrontDomain",
      description="The domain of the website",
      value=distribution.distribution_domain_name,
    )
