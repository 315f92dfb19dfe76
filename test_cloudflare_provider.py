#!/usr/bin/env python3
"""
Test suite for the Cloudflare provider

Requests are answered by an httpx.MockTransport, so no network is used.
"""

import json
import unittest
from unittest.mock import patch

import httpx

from dns_migrator.core.exceptions import StartupFailure, UpdateCallFailed
from dns_migrator.core.models import Zone
from dns_migrator.providers.cloudflare_provider import CF_API_BASE, CloudflareProvider
from dns_migrator.providers.dns_client import DNSClient


def api_response(result, page=1, total_pages=1, status_code=200):
    return httpx.Response(
        status_code,
        json={
            "success": True,
            "errors": [],
            "messages": [],
            "result": result,
            "result_info": {"page": page, "total_pages": total_pages},
        },
    )


class FakeCloudflare:
    """Minimal in-process stand-in for the Cloudflare API."""

    def __init__(self):
        self.requests = []
        self.zones = [
            {"id": "zone-1", "name": "example.com", "status": "active", "account": {"id": "acc-1"}},
            {"id": "zone-2", "name": "example.org", "status": "pending", "account": {"id": "acc-1"}},
        ]
        self.records = {
            "zone-1": [
                {
                    "id": f"rec-{i}",
                    "name": f"host{i}.example.com",
                    "type": "A",
                    "content": "203.0.113.10",
                    "ttl": 300,
                    "proxied": i % 2 == 0,
                }
                for i in range(150)
            ],
            "zone-2": [],
        }
        self.fail_zone = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/client/v4", "")
        page = int(request.url.params.get("page", 1))
        per_page = int(request.url.params.get("per_page", 100))

        if path == "/user":
            return api_response({"id": "user-1", "email": "ops@example.com"})
        if path == "/user/tokens/verify":
            return api_response({"id": "token-1", "status": "active"})
        if path == "/zones":
            return api_response(self.zones, page=1, total_pages=1)

        parts = path.strip("/").split("/")
        zone_id = parts[1]
        if zone_id == self.fail_zone:
            return httpx.Response(500, json={"success": False, "errors": []})

        if request.method == "GET":
            records = self.records[zone_id]
            total_pages = max(1, -(-len(records) // per_page))
            start = (page - 1) * per_page
            return api_response(
                records[start:start + per_page], page=page, total_pages=total_pages
            )

        if request.method == "PATCH":
            record_id = parts[3]
            if record_id == "locked":
                return httpx.Response(
                    400,
                    json={
                        "success": False,
                        "errors": [{"code": 81058, "message": "Record is locked"}],
                    },
                )
            body = json.loads(request.content)
            return api_response({"id": record_id, **body})

        return httpx.Response(404)


class CloudflareTestCase(unittest.TestCase):
    def setUp(self):
        self.api = FakeCloudflare()
        self.client = httpx.Client(
            base_url=CF_API_BASE, transport=httpx.MockTransport(self.api.handler)
        )
        self.config = {"email": "ops@example.com", "api_key": "global-key"}
        self.provider = CloudflareProvider(self.config, client=self.client)

    def tearDown(self):
        self.provider.close()


class TestAuthentication(CloudflareTestCase):
    def test_global_key_headers(self):
        result = self.provider.verify_credentials()

        request = self.api.requests[0]
        self.assertEqual(request.url.path, "/client/v4/user")
        self.assertEqual(request.headers["X-Auth-Email"], "ops@example.com")
        self.assertEqual(request.headers["X-Auth-Key"], "global-key")
        self.assertEqual(result["email"], "ops@example.com")

    def test_token_headers(self):
        provider = CloudflareProvider({"api_token": "scoped"}, client=self.client)

        provider.verify_credentials()

        request = self.api.requests[0]
        self.assertEqual(request.url.path, "/client/v4/user/tokens/verify")
        self.assertEqual(request.headers["Authorization"], "Bearer scoped")

    def test_has_credentials(self):
        with patch.dict("os.environ", {}, clear=True):
            self.assertTrue(self.provider.has_credentials())
            self.assertFalse(CloudflareProvider({"email": "a@b.c"}, client=self.client).has_credentials())

    def test_credentials_from_environment(self):
        env = {"CLOUDFLARE_API_TOKEN": "from-env"}
        with patch.dict("os.environ", env, clear=True):
            provider = CloudflareProvider({}, client=self.client)

        self.assertTrue(provider.has_credentials())
        self.assertEqual(provider.api_token, "from-env")


class TestListing(CloudflareTestCase):
    def test_list_zones(self):
        zones = self.provider.list_zones()

        self.assertEqual([zone.name for zone in zones], ["example.com", "example.org"])
        self.assertEqual(zones[0].account_id, "acc-1")
        self.assertEqual(self.api.requests[0].url.params["per_page"], "50")

    def test_list_records_follows_pagination(self):
        zone = Zone(id="zone-1", name="example.com", status="active")

        records = self.provider.list_records(zone)

        self.assertEqual(len(records), 150)
        self.assertEqual(len(self.api.requests), 2)
        self.assertEqual(self.api.requests[1].url.params["page"], "2")
        self.assertEqual(records[0].zone_id, "zone-1")
        self.assertEqual(records[0].zone_name, "example.com")
        self.assertTrue(records[0].proxied)
        self.assertFalse(records[1].proxied)
        self.assertFalse(records[0].locked)

    def test_scan_skips_failing_zone(self):
        self.api.fail_zone = "zone-2"
        dns_client = DNSClient({}, provider=self.provider)

        zones, records = dns_client.scan()

        self.assertEqual(len(zones), 2)
        self.assertEqual(len(records), 150)
        self.assertEqual(len(dns_client.find_records_by_content("203.0.113.10")), 150)

    def test_scan_without_credentials(self):
        with patch.dict("os.environ", {}, clear=True):
            provider = CloudflareProvider({}, client=self.client)
        dns_client = DNSClient({}, provider=provider)

        with self.assertRaises(StartupFailure):
            dns_client.scan()
        self.assertEqual(self.api.requests, [])


class TestUpdate(CloudflareTestCase):
    def test_update_record_patches(self):
        data = {"type": "A", "name": "host1.example.com", "content": "198.51.100.20", "ttl": 300, "proxied": False}

        result = self.provider.update_record("zone-1", "rec-1", data)

        request = self.api.requests[0]
        self.assertEqual(request.method, "PATCH")
        self.assertEqual(request.url.path, "/client/v4/zones/zone-1/dns_records/rec-1")
        self.assertEqual(json.loads(request.content), data)
        self.assertEqual(result["content"], "198.51.100.20")

    def test_provider_error_keeps_message(self):
        with self.assertRaises(UpdateCallFailed) as ctx:
            self.provider.update_record("zone-1", "locked", {"content": "198.51.100.20"})

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(
            str(ctx.exception),
            "Cloudflare API error: 400 Bad Request (81058: Record is locked)",
        )

    def test_transport_error(self):
        def broken(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(base_url=CF_API_BASE, transport=httpx.MockTransport(broken))
        provider = CloudflareProvider(self.config, client=client)

        with self.assertRaises(UpdateCallFailed) as ctx:
            provider.update_record("zone-1", "rec-1", {"content": "198.51.100.20"})
        self.assertEqual(str(ctx.exception), "connection refused")


if __name__ == "__main__":
    unittest.main(verbosity=2)
