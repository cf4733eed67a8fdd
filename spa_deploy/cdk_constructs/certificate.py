"""ACM certificate with DNS validation for CloudFront."""

from aws_cdk import aws_certificatemanager as acm
from aws_cdk import aws_route53 as route53
from constructs import Construct

# CloudFront only accepts certificates issued in us-east-1
CERTIFICATE_REGION = "us-east-1"


class SiteCertificate(Construct):
  """ACM certificate with DNS validation, requested in the CloudFront region."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    domain_name: str,
    hosted_zone: route53.IHostedZone,
  ) -> None:
    super().__init__(scope, id)

    # Deprecated, kept because acm.Certificate is issued in the stack region, not us-east-1
    self.certificate = acm.DnsValidatedCertificate(
      self,
      "Certificate",
      domain_name=domain_name,
      hosted_zone=hosted_zone,
      region=CERTIFICATE_REGION,
    )
