"""CDK constructs for single-page application deployments."""

from .certificate import SiteCertificate
from .content import WebsiteContent
from .distribution import SpaDistribution
from .dns import HostedZoneRecords
from .spa_site import SpaDeploy, SpaDeployment
from .storage import BucketSpec, PolicyStatementSpec, WebsiteBucket, build_bucket_spec

__all__ = [
  "BucketSpec",
  "HostedZoneRecords",
  "PolicyStatementSpec",
  "SiteCertificate",
  "SpaDeploy",
  "SpaDeployment",
  "SpaDistribution",
  "WebsiteBucket",
  "WebsiteContent",
  "build_bucket_spec",
]
