"""
Domain Tester - Post-migration health check

Resolves every A/AAAA record name through DNS and requests it over HTTP, falling
back to HTTPS, so operators can see which names still answer after a
migration.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import dns.resolver
import httpx

from .exceptions import InvalidRequest
from .models import ActivityType, DomainTestResult

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
HTTP_TIMEOUT = 10


class DomainTester:
    """Checks DNS resolution and HTTP status of scanned domains."""

    def __init__(
        self,
        dns_client,
        store,
        resolver: Optional[dns.resolver.Resolver] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.dns_client = dns_client
        self.store = store
        self.resolver = resolver or dns.resolver.Resolver()
        self.http_client = http_client or httpx.Client(
            timeout=HTTP_TIMEOUT, follow_redirects=True
        )

    def collect_domains(self) -> List[str]:
        names = {
            record.name
            for record in self.dns_client.list_records()
            if record.type in ("A", "AAAA") and record.name
        }
        return sorted(names)

    def test_domains(self) -> List[DomainTestResult]:
        domains = self.collect_domains()
        if not domains:
            raise InvalidRequest("No domains found to test")

        logger.info(f"Testing {len(domains)} domains...")
        results = []
        with ThreadPoolExecutor(max_workers=BATCH_SIZE) as executor:
            for start in range(0, len(domains), BATCH_SIZE):
                batch = domains[start:start + BATCH_SIZE]
                results.extend(executor.map(self.test_domain, batch))

        ok_count = len([r for r in results if r.status == 200])
        self.store.add_activity_log_entry(
            ActivityType.INFO,
            f"Tested {len(results)} domains",
            f"{ok_count} returned 200 status",
        )
        return sorted(results, key=lambda result: result.domain)

    def test_domain(self, domain: str) -> DomainTestResult:
        result = DomainTestResult(domain=domain)

        result.current_ip = self._resolve(domain)

        for scheme in ("http", "https"):
            try:
                response = self.http_client.head(f"{scheme}://{domain}")
                result.status = response.status_code
                result.error = None
                break
            except httpx.HTTPError as e:
                result.error = f"HTTP/HTTPS test failed: {e}"

        return result

    def _resolve(self, domain: str) -> Optional[str]:
        """First A address of domain, or its first AAAA address."""
        for rdtype in ("A", "AAAA"):
            try:
                answers = self.resolver.resolve(domain, rdtype)
                return str(answers[0])
            except Exception as e:
                # No address is not fatal; the HTTP check still runs.
                logger.debug(f"{rdtype} lookup failed for {domain}: {e}")
        return None

    def close(self) -> None:
        self.http_client.close()
