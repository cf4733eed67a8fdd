"""Route 53 records for a site served from an existing hosted zone."""

from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_route53 as route53
from aws_cdk import aws_route53_patterns as patterns
from aws_cdk import aws_route53_targets as targets
from constructs import Construct


def site_domain_name(zone_name: str, subdomain: str | None = None) -> str:
  """Fully qualified domain the site is served on."""
  if subdomain:
    return f"{subdomain}.{zone_name}"
  return zone_name


class HostedZoneRecords(Construct):
  """Existing Route 53 hosted zone and the site's records in it.

  The zone is looked up by name; a missing zone fails the synth.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    zone_name: str,
    subdomain: str | None = None,
  ) -> None:
    super().__init__(scope, id)

    self.zone_name = zone_name
    self.subdomain = subdomain
    self.domain_name = site_domain_name(zone_name, subdomain)

    self.hosted_zone = route53.HostedZone.from_lookup(
      self,
      "HostedZone",
      domain_name=zone_name,
    )

  def create_alias_record(self, distribution: cloudfront.IDistribution) -> route53.ARecord:
    """Create an A record aliasing the site domain to the distribution."""
    return route53.ARecord(
      self,
      "Alias",
      zone=self.hosted_zone,
      record_name=self.domain_name,
      target=route53.RecordTarget.from_alias(targets.CloudFrontTarget(distribution)),
    )

  def create_www_redirect(self) -> patterns.HttpsRedirect | None:
    """Redirect www.<zone> to the apex domain.

    Skipped for subdomain sites, which do not own the apex domain.
    """
    if self.subdomain:
      return None

    return patterns.HttpsRedirect(
      self,
      "Redirect",
      zone=self.hosted_zone,
      record_names=[f"www.{self.zone_name}"],
      target_domain=self.zone_name,
    )
