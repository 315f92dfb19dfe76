"""
Step definitions for DNS Migrator integration tests.
"""

from behave import given, then, when

from dns_migrator.core.dns_manager import DNSManager
from dns_migrator.core.models import DnsRecord, JobState, RecordState, Zone
from dns_migrator.providers.mock_provider import MockDNSProvider


@given("the DNS Migrator is configured with the mock provider")
def step_impl(context):
    context.provider = MockDNSProvider()
    context.provider.add_zone(Zone(id="zone-1", name=context.test_zone, status="active"))
    context.dns_manager = DNSManager(context.test_config, provider=context.provider)
    assert context.dns_manager.dns_client is not None


@given("the zone contains {count:d} A records pointing at the old address")
def step_impl(context, count):
    context.provider.add_records(
        DnsRecord(
            id=f"rec-{i}",
            zone_id="zone-1",
            zone_name=context.test_zone,
            name=f"web{i}.{context.test_zone}",
            type="A",
            content=context.old_ip,
            ttl=300,
        )
        for i in range(1, count + 1)
    )


@given("the DNS records have been scanned")
def step_impl(context):
    records = context.dns_manager.scan()
    assert len(records) == len(context.provider.records)


@given('the provider rejects updates of record "{record_id}" with "{message}"')
def step_impl(context, record_id, message):
    context.provider.fail_update(record_id, message)


@given("the provider has no credentials")
def step_impl(context):
    context.provider.credentials = False


@given('I create a backup named "{name}"')
def step_impl(context, name):
    context.backup_file = context.test_data_dir / f"{name}.json"
    context.dns_manager.create_backup(name=name, output_file=str(context.backup_file))


@when("I migrate all records from the old address to the new address")
def step_impl(context):
    record_ids = sorted(context.provider.records)
    _start_migration(context, record_ids)


@when('I migrate records "{record_ids}" from the old address to the new address')
def step_impl(context, record_ids):
    _start_migration(context, [r.strip() for r in record_ids.split(",")])


@when('I restore the backup "{name}"')
def step_impl(context, name):
    assert context.backup_file.stem == name
    assert context.dns_manager.restore_backup(str(context.backup_file))


@then('the job finishes with status "{status}"')
def step_impl(context, status):
    assert context.dns_manager.engine.wait(context.job_id, timeout=10)
    context.progress = context.dns_manager.engine.get_progress(context.job_id)
    assert context.progress.status == JobState(status), context.progress.status


@then(
    "the progress shows {completed:d} completed and {failed:d} failed records "
    "at {percentage:d} percent"
)
def step_impl(context, completed, failed, percentage):
    progress = context.progress
    assert progress.completed_records == completed, progress
    assert progress.failed_records == failed, progress
    assert progress.progress_percentage == percentage, progress
    assert progress.processing_records == 0, progress


@then("every record now points at the {which} address")
def step_impl(context, which):
    expected = context.new_ip if which == "new" else context.old_ip
    for record in context.provider.records.values():
        assert record.content == expected, f"{record.name} -> {record.content}"


@then('record "{record_id}" failed with "{message}"')
def step_impl(context, record_id, message):
    statuses = {
        status.record_id: status
        for status in context.dns_manager.store.get_record_statuses(context.job_id)
    }
    status = statuses[record_id]
    assert status.status == RecordState.FAILED, status
    assert status.error_message == message, status.error_message


@then('the newest activity entry says "{message}"')
def step_impl(context, message):
    entry = context.dns_manager.store.get_activity_log(1)[0]
    assert entry.message == message, entry.message


@then('the newest activity entry starts with "{prefix}"')
def step_impl(context, prefix):
    entry = context.dns_manager.store.get_activity_log(1)[0]
    assert entry.message.startswith(prefix), entry.message


def _start_migration(context, record_ids):
    context.job_id = context.dns_manager.engine.start_migration(
        context.old_ip, context.new_ip, record_ids
    )
    context.job_ids.append(context.job_id)
    if getattr(context, "backup_file", None):
        assert context.dns_manager.engine.wait(context.job_id, timeout=10)
