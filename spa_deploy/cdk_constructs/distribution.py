"""CloudFront distribution for single-page applications."""

from typing import Any

from aws_cdk import aws_certificatemanager as acm
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_cloudfront_origins as origins
from aws_cdk import aws_s3 as s3
from constructs import Construct

from spa_deploy.config import (
  DEFAULT_PATH_PATTERN,
  CacheBehavior,
  ConfigurationError,
  HostedZoneConfig,
  SiteConfig,
)

# Status codes rewritten to the SPA entry document so client-side routing can handle them
SPA_ERROR_CODES = (403, 404)


def error_page_path(config: SiteConfig | HostedZoneConfig) -> str:
  """Path served in place of 403/404 responses."""
  return "/" + (config.error_doc or config.index_doc)


def error_responses(config: SiteConfig | HostedZoneConfig) -> list[cloudfront.ErrorResponse]:
  page_path = error_page_path(config)
  return [
    cloudfront.ErrorResponse(
      http_status=code,
      response_http_status=200,
      response_page_path=page_path,
    )
    for code in SPA_ERROR_CODES
  ]


def cache_behaviors(config: SiteConfig | HostedZoneConfig) -> list[CacheBehavior]:
  """Caller's behaviors verbatim, or a single default behavior."""
  if config.cf_behaviors:
    return list(config.cf_behaviors)
  return [
    CacheBehavior(
      options={"viewer_protocol_policy": cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS}
    )
  ]


def validate_distribution_config(config: SiteConfig | HostedZoneConfig) -> None:
  """Reject viewer options and behaviors that cannot be applied to the distribution."""
  if isinstance(config, SiteConfig) and (config.ssl_method or config.security_policy):
    if not (config.certificate_arn and config.cf_aliases):
      raise ConfigurationError(
        "ssl_method/security_policy require certificate_arn and cf_aliases"
      )
  if config.geo_restriction is not None:
    config.geo_restriction.to_geo_restriction()

  if config.cf_behaviors:
    patterns = [behavior.path_pattern for behavior in config.cf_behaviors]
    if DEFAULT_PATH_PATTERN not in patterns:
      raise ConfigurationError(
        f"cf_behaviors must include a default behavior for path pattern {DEFAULT_PATH_PATTERN!r}"
      )
    if len(set(patterns)) != len(patterns):
      raise ConfigurationError("cf_behaviors path patterns must be unique")


class SpaDistribution(Construct):
  """CloudFront distribution reading a private bucket through an origin access identity.

  The viewer certificate comes from the hosted-zone certificate when one is
  given, otherwise from ``certificate_arn`` and ``cf_aliases`` on the config.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    bucket: s3.IBucket,
    config: SiteConfig | HostedZoneConfig,
    certificate: acm.ICertificate | None = None,
    domain_name: str | None = None,
  ) -> None:
    validate_distribution_config(config)
    super().__init__(scope, id)

    self.origin_access_identity = cloudfront.OriginAccessIdentity(
      self,
      "OriginAccessIdentity",
      comment=f"Access to the {config.index_doc} site bucket",
    )
    origin = origins.S3BucketOrigin.with_origin_access_identity(
      bucket,
      origin_access_identity=self.origin_access_identity,
    )

    behaviors = {
      behavior.path_pattern: cloudfront.BehaviorOptions(origin=origin, **behavior.options)
      for behavior in cache_behaviors(config)
    }
    default_behavior = behaviors.pop(DEFAULT_PATH_PATTERN)

    geo_restriction = None
    if config.geo_restriction is not None:
      geo_restriction = config.geo_restriction.to_geo_restriction()

    self.distribution = cloudfront.Distribution(
      self,
      "Distribution",
      default_behavior=default_behavior,
      additional_behaviors=behaviors or None,
      default_root_object=config.index_doc,
      error_responses=error_responses(config),
      geo_restriction=geo_restriction,
      **self._viewer_certificate(config, certificate, domain_name),
    )

  def _viewer_certificate(
    self,
    config: SiteConfig | HostedZoneConfig,
    certificate: acm.ICertificate | None,
    domain_name: str | None,
  ) -> dict[str, Any]:
    aliases: list[str] | None = None
    if certificate is not None and domain_name:
      aliases = [domain_name]
    elif isinstance(config, SiteConfig) and config.certificate_arn and config.cf_aliases:
      certificate = acm.Certificate.from_certificate_arn(
        self, "Certificate", config.certificate_arn
      )
      aliases = list(config.cf_aliases)

    # Without both, CloudFront serves its default certificate on its own domain
    if certificate is None or aliases is None:
      return {}

    viewer: dict[str, Any] = {
      "certificate": certificate,
      "domain_names": aliases,
      "ssl_support_method": config.ssl_method or cloudfront.SSLMethod.SNI,
    }
    if config.security_policy is not None:
      viewer["minimum_protocol_version"] = config.security_policy
    return viewer
