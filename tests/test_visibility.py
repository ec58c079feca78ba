from datetime import datetime, timedelta

from app.db.models.service import Service
from app.services.visibility import count_visible_requests, is_visible_to, visible_requests_for_provider

from conftest import BERLIN_MITTE, MUNICH


def test_open_request_in_area_and_category_is_visible(db_session, provider, open_request):
    items, total = visible_requests_for_provider(db_session, provider)

    assert total == 1
    assert [r.id for r in items] == [open_request.id]
    assert is_visible_to(provider, open_request)


def test_small_radius_hides_request(db_session, make_provider, cleaning, open_request):
    provider = make_provider(categories=[cleaning], radius=0.5)

    items, total = visible_requests_for_provider(db_session, provider)

    assert total == 0
    assert items == []


def test_provider_without_active_services_sees_nothing(db_session, make_provider, cleaning, open_request):
    provider = make_provider(categories=[cleaning])
    for service in provider.services:
        service.is_active = False
    db_session.commit()

    assert visible_requests_for_provider(db_session, provider) == ([], 0)


def test_other_category_is_invisible(db_session, provider, make_category, make_request):
    moving = make_category(slug="umzug", name_de="Umzug", name_en="Moving")
    make_request(moving)

    assert count_visible_requests(db_session, provider) == 0


def test_already_quoted_request_is_hidden(db_session, provider, open_request, make_quote):
    make_quote(open_request, provider)
    db_session.expire_all()

    assert count_visible_requests(db_session, provider) == 0
    assert not is_visible_to(provider, open_request)


def test_quote_by_another_provider_does_not_hide_request(db_session, provider, make_provider, cleaning, open_request, make_quote):
    other = make_provider(categories=[cleaning])
    make_quote(open_request, other)

    assert count_visible_requests(db_session, provider) == 1


def test_non_open_requests_are_hidden(db_session, provider, make_request, cleaning):
    for status in ("in_progress", "completed", "cancelled"):
        make_request(cleaning, status=status)

    assert count_visible_requests(db_session, provider) == 0


def test_newest_first_and_distance_filtered_before_paging(db_session, provider, make_request, cleaning):
    # far-away requests interleaved with near ones must not leave pages short
    near = []
    for i in range(5):
        make_request(cleaning, location=MUNICH, title=f"far {i}")
        near.append(make_request(cleaning, location=BERLIN_MITTE, title=f"near {i}"))

    # make creation order explicit
    base = datetime.utcnow() - timedelta(hours=1)
    for i, r in enumerate(near):
        r.created_at = base + timedelta(minutes=i)
    db_session.commit()

    page1, total = visible_requests_for_provider(db_session, provider, page=1, limit=3)
    page2, _ = visible_requests_for_provider(db_session, provider, page=2, limit=3)

    assert total == 5
    assert [r.title for r in page1] == ["near 4", "near 3", "near 2"]
    assert [r.title for r in page2] == ["near 1", "near 0"]


def test_second_category_service_widens_visibility(db_session, provider, make_category, make_request):
    garden = make_category(slug="garten", name_de="Garten", name_en="Garden")
    make_request(garden)
    assert count_visible_requests(db_session, provider) == 0

    db_session.add(Service(provider_id=provider.id, category_id=garden.id, title="Hedges", price_type="quote"))
    db_session.commit()
    db_session.expire_all()

    assert count_visible_requests(db_session, provider) == 1
