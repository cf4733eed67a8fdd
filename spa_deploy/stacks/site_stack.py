"""CDK stack for a single-page application site."""

from typing import Any

import aws_cdk as cdk
from constructs import Construct

from spa_deploy.cdk_constructs import SpaDeploy
from spa_deploy.config import GlobalConfig, HostedZoneConfig, SiteEntry


class SpaSiteStack(cdk.Stack):
  """Stack for a single site, built with the recipe its entry names."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    site: SiteEntry,
    global_config: GlobalConfig | None = None,
    **kwargs: Any,
  ) -> None:
    super().__init__(scope, id, **kwargs)

    self.spa = SpaDeploy(self, "Site", global_config)

    if site.mode == "basic":
      self.deployment = self.spa.create_basic_site(site.config)
    elif site.mode == "cloudfront":
      self.deployment = self.spa.create_site_with_cloudfront(site.config)
    else:
      if not isinstance(site.config, HostedZoneConfig):
        raise TypeError(f"Site {site.name!r} needs a HostedZoneConfig")
      self.deployment = self.spa.create_site_from_hosted_zone(site.config)

    cdk.Tags.of(self).add("Project", "spa-deploy")
    cdk.Tags.of(self).add("Site", site.name)
