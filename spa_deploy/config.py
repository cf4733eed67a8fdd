"""Configuration records and YAML loader for single-page application deployments."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3


class ConfigurationError(ValueError):
  """Raised when a deployment configuration cannot produce a valid resource graph."""


@dataclass(frozen=True)
class GlobalConfig:
  """Library-wide defaults captured once per SpaDeploy instance."""

  encrypt_bucket: bool = False
  ip_filter: bool = False
  ip_list: list[str] | None = None
  role: iam.IRole | None = None


def resolve_global_config(config: GlobalConfig | None = None) -> GlobalConfig:
  """Return the supplied global config, or the defaults when none was given.

  A partial config is used as-is; missing fields keep their dataclass defaults.
  """
  if config is None:
    return GlobalConfig(encrypt_bucket=False, ip_filter=False)
  return config


@dataclass(frozen=True)
class GeoRestrictionConfig:
  """CloudFront geo restriction, passed through to the distribution."""

  restriction_type: str
  locations: list[str]

  def to_geo_restriction(self) -> cloudfront.GeoRestriction:
    """Convert to the CloudFront geo restriction construct value."""
    kind = self.restriction_type.lower()
    if kind in ("whitelist", "allowlist"):
      return cloudfront.GeoRestriction.allowlist(*self.locations)
    if kind in ("blacklist", "denylist"):
      return cloudfront.GeoRestriction.denylist(*self.locations)
    raise ConfigurationError(
      f"Unknown geo restriction type {self.restriction_type!r}, "
      "expected 'whitelist' or 'blacklist'"
    )


# Path pattern of the behavior CloudFront applies when no other pattern matches
DEFAULT_PATH_PATTERN = "*"


@dataclass(frozen=True)
class CacheBehavior:
  """Cache behavior for one path pattern.

  ``options`` are CloudFront behavior options other than the origin, which is
  always the site bucket. The behavior for ``*`` is the distribution default.
  """

  path_pattern: str = DEFAULT_PATH_PATTERN
  options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, kw_only=True)
class _BaseSiteConfig:
  index_doc: str
  website_folder: str
  error_doc: str | None = None
  cf_behaviors: list[CacheBehavior] | None = None
  export_website_url_output: bool = False
  export_website_url_name: str | None = None
  block_public_access: s3.BlockPublicAccess | None = None
  ssl_method: cloudfront.SSLMethod | None = None
  security_policy: cloudfront.SecurityPolicyProtocol | None = None
  geo_restriction: GeoRestrictionConfig | None = None
  role: iam.IRole | None = None
  memory_limit: int | None = None


@dataclass(frozen=True, kw_only=True)
class SiteConfig(_BaseSiteConfig):
  """Configuration for a basic or CloudFront-fronted site."""

  certificate_arn: str | None = None
  cf_aliases: list[str] | None = None


@dataclass(frozen=True, kw_only=True)
class HostedZoneConfig(_BaseSiteConfig):
  """Configuration for a site served from an existing Route 53 hosted zone."""

  zone_name: str
  subdomain: str | None = None


SiteMode = Literal["basic", "cloudfront", "hosted_zone"]

SSL_METHODS = {
  "sni": cloudfront.SSLMethod.SNI,
  "sni-only": cloudfront.SSLMethod.SNI,
  "vip": cloudfront.SSLMethod.VIP,
}

SECURITY_POLICIES = {
  "SSLv3": cloudfront.SecurityPolicyProtocol.SSL_V3,
  "TLSv1": cloudfront.SecurityPolicyProtocol.TLS_V1,
  "TLSv1_2016": cloudfront.SecurityPolicyProtocol.TLS_V1_2016,
  "TLSv1.1_2016": cloudfront.SecurityPolicyProtocol.TLS_V1_1_2016,
  "TLSv1.2_2018": cloudfront.SecurityPolicyProtocol.TLS_V1_2_2018,
  "TLSv1.2_2019": cloudfront.SecurityPolicyProtocol.TLS_V1_2_2019,
  "TLSv1.2_2021": cloudfront.SecurityPolicyProtocol.TLS_V1_2_2021,
}

VIEWER_PROTOCOL_POLICIES = {
  "allow-all": cloudfront.ViewerProtocolPolicy.ALLOW_ALL,
  "https-only": cloudfront.ViewerProtocolPolicy.HTTPS_ONLY,
  "redirect-to-https": cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
}

ALLOWED_METHODS = {
  "GET_HEAD": cloudfront.AllowedMethods.ALLOW_GET_HEAD,
  "GET_HEAD_OPTIONS": cloudfront.AllowedMethods.ALLOW_GET_HEAD_OPTIONS,
  "ALL": cloudfront.AllowedMethods.ALLOW_ALL,
}

# Site keys that map one-to-one onto config fields
_PLAIN_KEYS = (
  "error_doc",
  "export_website_url_output",
  "export_website_url_name",
  "memory_limit",
)


@dataclass
class SiteEntry:
  """One site from the YAML file, with the recipe used to build it."""

  name: str
  mode: SiteMode
  config: SiteConfig | HostedZoneConfig
  region: str = "us-east-1"
  account: str | None = None


@dataclass
class AppConfig:
  """Multi-site deployment configuration."""

  global_config: GlobalConfig = field(default_factory=GlobalConfig)
  sites: list[SiteEntry] = field(default_factory=list)

  @classmethod
  def from_yaml(cls, path: Path | str = "sites.yaml") -> "AppConfig":
    """Load configuration from YAML file."""
    with open(path) as f:
      data = _mapping(yaml.safe_load(f) or {}, str(path))

    global_data = _mapping(data.get("global") or {}, "global")
    global_config = GlobalConfig(
      encrypt_bucket=global_data.get("encrypt_bucket", False),
      ip_filter=global_data.get("ip_filter", False),
      ip_list=global_data.get("ip_list"),
    )

    defaults = _mapping(data.get("defaults") or {}, "defaults")
    sites: list[SiteEntry] = []

    for site_data in data.get("sites") or []:
      # Merge defaults with site-specific config
      merged = {**defaults, **_mapping(site_data, "site")}
      sites.append(_parse_site(merged))

    return cls(global_config=global_config, sites=sites)


def _mapping(value: Any, where: str) -> dict[str, Any]:
  if not isinstance(value, dict):
    raise ConfigurationError(f"Expected a mapping for {where}, got {type(value).__name__}")
  return value


def _require(data: dict[str, Any], key: str, site: str) -> Any:
  if not data.get(key):
    raise ConfigurationError(f"Site {site!r} is missing required key {key!r}")
  return data[key]


def _lookup(table: dict[str, Any], value: str, key: str, site: str) -> Any:
  if value not in table:
    raise ConfigurationError(
      f"Site {site!r} has unknown {key} {value!r}, expected one of {sorted(table)}"
    )
  return table[value]


def _parse_site(data: dict[str, Any]) -> SiteEntry:
  name = _require(data, "name", "<unnamed>")
  mode = data.get("mode", "cloudfront")
  if mode not in ("basic", "cloudfront", "hosted_zone"):
    raise ConfigurationError(f"Site {name!r} has unknown mode {mode!r}")

  kwargs: dict[str, Any] = {
    "index_doc": _require(data, "index_doc", name),
    "website_folder": _require(data, "website_folder", name),
  }
  for key in _PLAIN_KEYS:
    if key in data:
      kwargs[key] = data[key]

  if "ssl_method" in data:
    kwargs["ssl_method"] = _lookup(SSL_METHODS, data["ssl_method"], "ssl_method", name)
  if "security_policy" in data:
    kwargs["security_policy"] = _lookup(
      SECURITY_POLICIES, data["security_policy"], "security_policy", name
    )
  if geo := data.get("geo_restriction"):
    geo = _mapping(geo, f"geo_restriction of site {name!r}")
    kwargs["geo_restriction"] = GeoRestrictionConfig(
      restriction_type=_require(geo, "restriction_type", name),
      locations=list(geo.get("locations") or []),
    )
  if behaviors := data.get("cf_behaviors"):
    if not isinstance(behaviors, list):
      raise ConfigurationError(f"Site {name!r} cf_behaviors must be a list")
    kwargs["cf_behaviors"] = [_parse_behavior(b, name) for b in behaviors]

  config: SiteConfig | HostedZoneConfig
  if mode == "hosted_zone":
    config = HostedZoneConfig(
      zone_name=_require(data, "zone_name", name),
      subdomain=data.get("subdomain"),
      **kwargs,
    )
  else:
    config = SiteConfig(
      certificate_arn=data.get("certificate_arn"),
      cf_aliases=data.get("cf_aliases"),
      **kwargs,
    )

  return SiteEntry(
    name=name,
    mode=mode,
    config=config,
    region=data.get("region", "us-east-1"),
    account=data.get("account"),
  )


def _parse_behavior(data: Any, site: str) -> CacheBehavior:
  data = dict(_mapping(data, f"cf_behaviors entry of site {site!r}"))
  path_pattern = data.pop("path_pattern", DEFAULT_PATH_PATTERN)

  options: dict[str, Any] = {}
  if "viewer_protocol_policy" in data:
    options["viewer_protocol_policy"] = _lookup(
      VIEWER_PROTOCOL_POLICIES, data.pop("viewer_protocol_policy"), "viewer_protocol_policy", site
    )
  if "allowed_methods" in data:
    options["allowed_methods"] = _lookup(
      ALLOWED_METHODS, data.pop("allowed_methods"), "allowed_methods", site
    )
  if "compress" in data:
    options["compress"] = bool(data.pop("compress"))
  if data:
    raise ConfigurationError(
      f"Site {site!r} has unsupported cf_behaviors keys {sorted(data)}"
    )

  return CacheBehavior(path_pattern=path_pattern, options=options)
