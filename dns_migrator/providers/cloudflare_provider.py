"""
Cloudflare DNS provider implementation.

This module talks to the Cloudflare v4 REST API using httpx. Both global API
key (email + key) and scoped API token authentication are supported.
"""

import logging
import os
from typing import Dict, List, Optional

import httpx

from .base_provider import DNSProvider
from ..core.exceptions import UpdateCallFailed
from ..core.models import DnsRecord, Zone

logger = logging.getLogger(__name__)

CF_API_BASE = "https://api.cloudflare.com/client/v4"
ZONES_PER_PAGE = 50
RECORDS_PER_PAGE = 100


class CloudflareProvider(DNSProvider):
    """Cloudflare DNS provider implementation using httpx."""

    name = "cloudflare"

    def __init__(self, config: Dict, client: Optional[httpx.Client] = None):
        """Initialize Cloudflare provider."""
        self.config = config
        self.email = config.get("email") or os.environ.get("CLOUDFLARE_EMAIL", "")
        self.api_key = config.get("api_key") or os.environ.get("CLOUDFLARE_API_KEY", "")
        self.api_token = config.get("api_token") or os.environ.get(
            "CLOUDFLARE_API_TOKEN", ""
        )
        self.base_url = config.get("base_url", CF_API_BASE).rstrip("/")
        self.timeout = config.get("timeout", 30)

        self._client = client or httpx.Client(
            base_url=self.base_url, timeout=self.timeout
        )

        logger.info(f"Cloudflare provider initialized for {self.base_url}")

    def close(self) -> None:
        self._client.close()

    def has_credentials(self) -> bool:
        return bool(self.api_token or (self.email and self.api_key))

    def _auth_headers(self) -> Dict[str, str]:
        if self.api_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        return {"X-Auth-Email": self.email, "X-Auth-Key": self.api_key}

    def _request(self, method: str, path: str, **kwargs) -> Dict:
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Cloudflare request {method} {path} failed: {e}")
            raise UpdateCallFailed(str(e) or e.__class__.__name__) from e

        if response.is_error:
            message = (
                f"Cloudflare API error: {response.status_code} {response.reason_phrase}"
            )
            details = self._error_messages(response)
            if details:
                message += f" ({details})"
            logger.error(message)
            raise UpdateCallFailed(message, status_code=response.status_code)

        payload = response.json()
        if payload.get("success") is False:
            message = f"Cloudflare API error: {self._error_messages(response)}"
            logger.error(message)
            raise UpdateCallFailed(message, status_code=response.status_code)
        return payload

    @staticmethod
    def _error_messages(response: httpx.Response) -> str:
        try:
            errors = response.json().get("errors") or []
        except ValueError:
            return ""
        return "; ".join(
            f"{error.get('code')}: {error.get('message')}" for error in errors
        )

    def _paginate(self, path: str, per_page: int) -> List[Dict]:
        results = []
        page = 1
        while True:
            payload = self._request(
                "GET", path, params={"page": page, "per_page": per_page}
            )
            results.extend(payload.get("result") or [])

            total_pages = (payload.get("result_info") or {}).get("total_pages") or 0
            if total_pages <= page:
                break
            page += 1
        return results

    def verify_credentials(self) -> Dict:
        path = "/user/tokens/verify" if self.api_token else "/user"
        return self._request("GET", path).get("result") or {}

    def list_zones(self) -> List[Zone]:
        zones = [
            Zone(
                id=zone["id"],
                name=zone["name"],
                status=zone.get("status", ""),
                account_id=(zone.get("account") or {}).get("id"),
            )
            for zone in self._paginate("/zones", ZONES_PER_PAGE)
        ]
        logger.info(f"Retrieved {len(zones)} zones from Cloudflare")
        return zones

    def list_records(self, zone: Zone) -> List[DnsRecord]:
        # Zone id and name come from the zone being listed, not the payload.
        records = [
            DnsRecord(
                id=record["id"],
                zone_id=zone.id,
                zone_name=zone.name,
                name=record["name"],
                type=record["type"],
                content=record["content"],
                ttl=record.get("ttl", 1),
                proxied=bool(record.get("proxied") or False),
                locked=bool(record.get("locked") or False),
            )
            for record in self._paginate(
                f"/zones/{zone.id}/dns_records", RECORDS_PER_PAGE
            )
        ]
        logger.info(f"Retrieved {len(records)} records for zone {zone.name}")
        return records

    def update_record(self, zone_id: str, record_id: str, data: Dict) -> Dict:
        """Update an existing DNS record with a PATCH call."""
        payload = self._request(
            "PATCH", f"/zones/{zone_id}/dns_records/{record_id}", json=data
        )
        logger.debug(f"Updated record {record_id} in zone {zone_id}")
        return payload.get("result") or {}
