from datetime import datetime, timedelta

import pytest

from app.core.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.db.models.booking import Booking
from app.db.models.quote import Quote
from app.services.quotes import accept_quote, create_quote, expire_stale_quotes, reject_quote


def _in(days):
    return datetime.utcnow() + timedelta(days=days)


class TestCreateQuote:

    def test_approved_provider_quotes_open_request(self, db_session, provider, open_request):
        quote = create_quote(db_session, provider.user, open_request.id, 120.0, "Tuesday works", _in(7))

        assert quote.id is not None
        assert quote.status == "pending"
        assert quote.provider_id == provider.id

    def test_unapproved_provider_is_forbidden(self, db_session, make_provider, cleaning, open_request):
        pending = make_provider(categories=[cleaning], approved=False)

        with pytest.raises(ForbiddenError):
            create_quote(db_session, pending.user, open_request.id, 100.0, "", _in(7))

    def test_category_mismatch_is_forbidden(self, db_session, make_provider, make_category, open_request):
        painter = make_provider(categories=[make_category(slug="maler", name_de="Maler", name_en="Painter")])

        with pytest.raises(ForbiddenError):
            create_quote(db_session, painter.user, open_request.id, 100.0, "", _in(7))

    def test_non_open_request_is_invalid_state(self, db_session, provider, make_request, cleaning):
        cancelled = make_request(cleaning, status="cancelled")

        with pytest.raises(InvalidStateError):
            create_quote(db_session, provider.user, cancelled.id, 100.0, "", _in(7))

    def test_second_quote_from_same_provider_conflicts(self, db_session, provider, open_request):
        create_quote(db_session, provider.user, open_request.id, 100.0, "", _in(7))

        with pytest.raises(ConflictError):
            create_quote(db_session, provider.user, open_request.id, 90.0, "cheaper", _in(7))

    def test_valid_until_in_the_past_is_rejected(self, db_session, provider, open_request):
        with pytest.raises(ValidationError):
            create_quote(db_session, provider.user, open_request.id, 100.0, "", _in(-1))

    def test_unknown_request(self, db_session, provider):
        with pytest.raises(NotFoundError):
            create_quote(db_session, provider.user, 9999, 100.0, "", _in(7))

    def test_customer_without_provider_profile(self, db_session, customer, open_request):
        with pytest.raises(NotFoundError):
            create_quote(db_session, customer, open_request.id, 100.0, "", _in(7))


class TestAcceptQuote:

    def test_accept_creates_single_booking_at_quoted_price(self, db_session, customer, provider, open_request, make_quote):
        quote = make_quote(open_request, provider, price=120.0)

        booking = accept_quote(db_session, customer, quote.id, _in(3))

        assert booking.total_price == 120.0
        assert booking.status == "pending"
        assert booking.payment_status == "pending"
        assert booking.quote_id == quote.id
        assert booking.request_id == open_request.id

        db_session.expire_all()
        assert db_session.get(Quote, quote.id).status == "accepted"
        assert open_request.status == "in_progress"
        assert db_session.query(Booking).filter(Booking.request_id == open_request.id).count() == 1

    def test_siblings_are_rejected(self, db_session, customer, provider, make_provider, cleaning, open_request, make_quote):
        other = make_provider(categories=[cleaning])
        chosen = make_quote(open_request, provider, price=120.0)
        sibling = make_quote(open_request, other, price=150.0)

        accept_quote(db_session, customer, chosen.id, _in(3))

        db_session.expire_all()
        assert db_session.get(Quote, sibling.id).status == "rejected"

    def test_second_acceptance_on_same_request_fails(self, db_session, customer, provider, make_provider, cleaning, open_request, make_quote):
        other = make_provider(categories=[cleaning])
        first = make_quote(open_request, provider)
        second = make_quote(open_request, other)

        accept_quote(db_session, customer, first.id, _in(3))

        with pytest.raises(InvalidStateError):
            accept_quote(db_session, customer, second.id, _in(3))
        assert db_session.query(Booking).filter(Booking.request_id == open_request.id).count() == 1

    def test_only_request_owner_can_accept(self, db_session, make_user, provider, open_request, make_quote):
        quote = make_quote(open_request, provider)
        stranger = make_user("customer")

        with pytest.raises(ForbiddenError):
            accept_quote(db_session, stranger, quote.id, _in(3))

    def test_expired_quote_cannot_be_accepted(self, db_session, customer, provider, open_request, make_quote):
        quote = make_quote(open_request, provider, valid_for=timedelta(minutes=-5))

        with pytest.raises(InvalidStateError):
            accept_quote(db_session, customer, quote.id, _in(3))

        db_session.expire_all()
        assert open_request.status == "open"
        assert db_session.query(Booking).count() == 0

    def test_scheduled_date_falls_back_to_preferred_date(self, db_session, customer, provider, make_request, cleaning, make_quote):
        preferred = _in(10).replace(microsecond=0)
        request = make_request(cleaning, customer=customer, preferred_date=preferred)
        quote = make_quote(request, provider)

        booking = accept_quote(db_session, customer, quote.id)

        assert booking.scheduled_date == preferred

    def test_missing_schedule_is_validation_error(self, db_session, customer, provider, open_request, make_quote):
        quote = make_quote(open_request, provider)

        with pytest.raises(ValidationError):
            accept_quote(db_session, customer, quote.id)

        db_session.expire_all()
        assert db_session.get(Quote, quote.id).status == "pending"


class TestRejectAndExpire:

    def test_reject_is_terminal(self, db_session, customer, provider, open_request, make_quote):
        quote = make_quote(open_request, provider)

        rejected = reject_quote(db_session, customer, quote.id)
        assert rejected.status == "rejected"

        with pytest.raises(InvalidStateError):
            accept_quote(db_session, customer, quote.id, _in(3))
        with pytest.raises(InvalidStateError):
            reject_quote(db_session, customer, quote.id)

    def test_expire_sweep_only_touches_stale_pending(self, db_session, provider, make_provider, cleaning, make_request, make_quote):
        stale = make_quote(make_request(cleaning), provider, valid_for=timedelta(hours=-1))
        fresh = make_quote(make_request(cleaning), provider)
        other = make_provider(categories=[cleaning])
        already_rejected = make_quote(make_request(cleaning), other, status="rejected", valid_for=timedelta(hours=-1))

        assert expire_stale_quotes(db_session) == 1

        db_session.expire_all()
        assert db_session.get(Quote, stale.id).status == "expired"
        assert db_session.get(Quote, fresh.id).status == "pending"
        assert db_session.get(Quote, already_rejected.id).status == "rejected"
