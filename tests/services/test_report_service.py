import pytest

from playerduo.core.exceptions import BusinessLogicError, NotFoundError
from playerduo.models.enums import ReportStatus

@pytest.fixture
async def reported(make_user, make_game_player):
    reporter = await make_user(username="reporter")
    owner = await make_user(username="toxic")
    game_player = await make_game_player(owner)
    return reporter, game_player

@pytest.mark.asyncio
async def test_create_report_pending(services, reported):
    reporter, game_player = reported

    report = await services.report.create_report(reporter, game_player.id, "Toxic", "flamed the team", "http://v/1.mp4")

    assert report.status == ReportStatus.PENDING
    assert report.reporter_id == reporter.id
    assert report.resolved_at is None

@pytest.mark.asyncio
async def test_create_report_unknown_player(services, make_user):
    reporter = await make_user()
    with pytest.raises(NotFoundError):
        await services.report.create_report(reporter, 404, "Spam")

@pytest.mark.asyncio
async def test_duplicate_active_report_rejected_until_closed(services, reported):
    reporter, game_player = reported
    first = await services.report.create_report(reporter, game_player.id, "Toxic")

    with pytest.raises(BusinessLogicError):
        await services.report.create_report(reporter, game_player.id, "Toxic again")

    await services.report.update_report_status(first.id, ReportStatus.PROCESSING)
    with pytest.raises(BusinessLogicError):
        await services.report.create_report(reporter, game_player.id, "Still toxic")

    await services.report.update_report_status(first.id, ReportStatus.RESOLVED, "Warned")
    second = await services.report.create_report(reporter, game_player.id, "Again")
    assert second.id != first.id

@pytest.mark.asyncio
async def test_update_status_sets_resolved_at_and_notifies(services, reported):
    reporter, game_player = reported
    report = await services.report.create_report(reporter, game_player.id, "Cheating")

    updated = await services.report.update_report_status(report.id, ReportStatus.REJECTED, "Not enough evidence")
    assert updated.resolved_at is not None
    assert updated.resolution == "Not enough evidence"

    reopened = await services.report.update_report_status(report.id, ReportStatus.PROCESSING)
    assert reopened.resolved_at is None

    notifications = await services.notification.get_user_notifications(reporter.id)
    assert len(notifications) == 2
    assert all(n.type == "report" for n in notifications)

@pytest.mark.asyncio
async def test_queries_and_summary(services, reported, make_user):
    reporter, game_player = reported
    other = await make_user()
    first = await services.report.create_report(reporter, game_player.id, "A")
    await services.report.create_report(other, game_player.id, "B")
    await services.report.update_report_status(first.id, ReportStatus.RESOLVED)

    assert len(await services.report.get_all_reports()) == 2
    assert [r.id for r in await services.report.get_reports_by_reporter(reporter.id)] == [first.id]
    assert len(await services.report.get_reports_by_player(game_player.id)) == 2
    assert len(await services.report.get_reports_by_status(ReportStatus.RESOLVED)) == 1
    assert len(await services.report.get_active_reports()) == 1
    assert await services.report.get_summary() == {"total": 2, "unprocessed": 1}

@pytest.mark.asyncio
async def test_delete_report(services, reported):
    reporter, game_player = reported
    report = await services.report.create_report(reporter, game_player.id, "A")

    await services.report.delete_report(report.id)

    with pytest.raises(NotFoundError):
        await services.report.get_report(report.id)
