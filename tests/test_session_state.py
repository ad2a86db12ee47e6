from __future__ import annotations

from datetime import datetime, timezone

from pointbridge.core.session_state import AuthChangeEvent, SessionHolder
from pointbridge.models.session import AuthSession, AuthUser


def _session(expires_at: int) -> AuthSession:
    timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    user = AuthUser(
        id="user-1",
        email="admin@rac-rewards.com",
        role="admin",
        created_at=timestamp,
        updated_at=timestamp,
    )
    return AuthSession(
        access_token="local-token-user-1-0",
        refresh_token="local-refresh-user-1-0",
        expires_in=3600,
        expires_at=expires_at,
        user=user,
    )


def test_current_hides_expired_session_but_keeps_it_stored(clock) -> None:
    holder = SessionHolder(clock=clock)
    session = _session(int(clock.now) + 10)
    holder.set(session)

    assert holder.current() == session
    clock.advance(10)
    assert holder.current() is None
    assert holder.stored == session


def test_listeners_receive_changes_until_unsubscribed(clock) -> None:
    holder = SessionHolder(clock=clock)
    events: list[AuthChangeEvent] = []
    subscription = holder.subscribe(lambda event, _session: events.append(event))

    holder.set(_session(int(clock.now) + 60))
    holder.clear()
    holder.clear()
    subscription.unsubscribe()
    subscription.unsubscribe()
    holder.set(_session(int(clock.now) + 60))

    assert events == [
        AuthChangeEvent.SIGNED_OUT,
        AuthChangeEvent.SIGNED_IN,
        AuthChangeEvent.SIGNED_OUT,
    ]


def test_subscribe_reports_signed_in_when_session_is_active(clock) -> None:
    holder = SessionHolder(clock=clock)
    session = _session(int(clock.now) + 60)
    holder.set(session)
    received: list[tuple] = []

    holder.subscribe(lambda event, current: received.append((event, current)))

    assert received == [(AuthChangeEvent.SIGNED_IN, session)]


def test_failing_listener_does_not_block_others(clock) -> None:
    holder = SessionHolder(clock=clock)
    events: list[AuthChangeEvent] = []

    def explode(event, session) -> None:
        raise RuntimeError("listener bug")

    holder.subscribe(explode)
    holder.subscribe(lambda event, _session: events.append(event))
    holder.set(_session(int(clock.now) + 60))

    assert events == [AuthChangeEvent.SIGNED_OUT, AuthChangeEvent.SIGNED_IN]


def test_separate_holders_do_not_share_state(clock) -> None:
    first = SessionHolder(clock=clock)
    second = SessionHolder(clock=clock)

    first.set(_session(int(clock.now) + 60))

    assert first.current() is not None
    assert second.current() is None
