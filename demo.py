#!/usr/bin/env python3
"""
DNS Migrator - Demo Script

This script walks through a bulk migration against the mock provider, so no
real DNS records are touched.
"""

from rich.console import Console
from rich.panel import Panel

from dns_migrator.cli.main import config_logger, get_default_config
from dns_migrator.core.dns_manager import DNSManager
from dns_migrator.core.models import DnsRecord, Zone
from dns_migrator.providers.mock_provider import MockDNSProvider

console = Console()

OLD_IP = "10.33.1.10"
NEW_IP = "10.44.1.10"


def build_demo_provider():
    """Create a mock provider holding two zones of sample records."""
    provider = MockDNSProvider()
    provider.add_zone(Zone(id="zone-ib", name="ib.bigbank.com", status="active"))
    provider.add_zone(Zone(id="zone-api", name="api.bigbank.com", status="active"))

    samples = [
        ("zone-ib", "ib.bigbank.com", "web1.ib.bigbank.com", "A", OLD_IP, False),
        ("zone-ib", "ib.bigbank.com", "web2.ib.bigbank.com", "A", OLD_IP, False),
        ("zone-ib", "ib.bigbank.com", "db.ib.bigbank.com", "A", "10.33.2.20", False),
        ("zone-ib", "ib.bigbank.com", "legacy.ib.bigbank.com", "A", OLD_IP, True),
        ("zone-api", "api.bigbank.com", "api.bigbank.com", "A", OLD_IP, False),
        ("zone-api", "api.bigbank.com", "www.api.bigbank.com", "CNAME", "api.bigbank.com", False),
    ]
    provider.add_records(
        DnsRecord(
            id=f"rec-{i}",
            zone_id=zone_id,
            zone_name=zone_name,
            name=name,
            type=record_type,
            content=content,
            ttl=300,
            locked=locked,
        )
        for i, (zone_id, zone_name, name, record_type, content, locked) in enumerate(samples, 1)
    )
    return provider


def display_demo_header():
    """Display the demo header."""
    console.print(
        Panel.fit(
            "[bold blue]DNS Migrator - Demo[/bold blue]\n"
            f"[cyan]Moving every record from {OLD_IP} to {NEW_IP}[/cyan]",
            border_style="blue",
        )
    )
    console.print()


def main():
    """Main demo function."""
    display_demo_header()

    config = get_default_config()
    config["logging"]["file"] = "demo.log"
    config["migration"]["poll_interval"] = 0.1
    config_logger(config)

    dns_manager = DNSManager(config, provider=build_demo_provider())
    try:
        console.print("[bold]Scanning zones...[/bold]")
        dns_manager.scan()
        dns_manager.show_records()
        console.print()

        console.print("[bold]Dry run[/bold]")
        dns_manager.migrate(OLD_IP, NEW_IP, dry_run=True)
        console.print()

        console.print("[bold]Would you like to apply the migration?[/bold]")
        response = input("Proceed? (yes/no): ").lower().strip()
        if response not in ["yes", "y"]:
            console.print("[yellow]Migration skipped[/yellow]")
            return

        dns_manager.create_backup(name="demo-before-migration")
        result = dns_manager.migrate(OLD_IP, NEW_IP, assume_yes=True)
        dns_manager.show_records(content=NEW_IP)

        console.print(
            Panel.fit(
                "[bold green]Demo Summary[/bold green]\n"
                f"Migration {'succeeded' if result else 'had failures'}\n"
                "Locked records were left untouched\n"
                "Mock provider used (no real DNS changes)",
                border_style="green",
            )
        )
    finally:
        dns_manager.close()
        console.print()
        console.print("[bold blue]Demo completed![/bold blue]")


if __name__ == "__main__":
    main()
