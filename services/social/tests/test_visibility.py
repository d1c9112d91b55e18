import uuid

import pytest

from app.accounts.constants import AccountStatus
from app.exceptions import UserHidden, UserNotFound
from app.social_graph import service as svc
from app.social_graph import visibility
from app.social_graph.constants import FollowState, Verdict
from app.social_graph.visibility import VisibilityFacts, decide

VIEWER = uuid.uuid4()
SUBJECT = uuid.uuid4()


def _facts(**overrides) -> VisibilityFacts:
    values = dict(
        viewer_id=VIEWER,
        subject_id=SUBJECT,
        subject_status=AccountStatus.NORMAL,
        subject_is_private=False,
        blocked=False,
        follow_state=None,
        viewer_is_staff=False,
    )
    values.update(overrides)
    return VisibilityFacts(**values)


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        ({}, Verdict.ALLOW),
        ({"subject_is_private": True}, Verdict.DENY_PRIVATE),
        ({"subject_is_private": True, "follow_state": FollowState.PENDING}, Verdict.DENY_PRIVATE),
        ({"subject_is_private": True, "follow_state": FollowState.ACCEPTED}, Verdict.ALLOW),
        ({"blocked": True}, Verdict.DENY_BLOCKED),
        ({"blocked": True, "follow_state": FollowState.ACCEPTED}, Verdict.DENY_BLOCKED),
        ({"subject_status": AccountStatus.BANNED}, Verdict.DENY_BANNED),
        ({"subject_status": AccountStatus.SUSPENDED}, Verdict.DENY_BANNED),
        ({"subject_status": AccountStatus.BANNED, "blocked": True}, Verdict.DENY_BANNED),
        ({"subject_status": AccountStatus.BANNED, "viewer_is_staff": True}, Verdict.ALLOW),
        (
            {"subject_status": AccountStatus.BANNED, "viewer_is_staff": True, "blocked": True},
            Verdict.DENY_BLOCKED,
        ),
    ],
)
def test_decide_rules_first_match_wins(overrides, expected) -> None:
    assert decide(_facts(**overrides)) == expected


def test_decide_self_is_allowed_even_when_private() -> None:
    assert decide(_facts(subject_id=VIEWER, subject_is_private=True)) == Verdict.ALLOW


def test_decide_self_banned_is_denied() -> None:
    facts = _facts(subject_id=VIEWER, subject_status=AccountStatus.BANNED)
    assert decide(facts) == Verdict.DENY_BANNED


def test_summary_visible_only_survives_privacy() -> None:
    assert visibility.summary_visible(Verdict.ALLOW)
    assert visibility.summary_visible(Verdict.DENY_PRIVATE)
    assert not visibility.summary_visible(Verdict.DENY_BLOCKED)
    assert not visibility.summary_visible(Verdict.DENY_BANNED)


@pytest.mark.asyncio
async def test_resolve_private_account_follow_lifecycle(db_session, make_account) -> None:
    viewer = await make_account()
    subject = await make_account(is_private=True)

    assert await visibility.resolve(db_session, viewer.id, subject.id) == Verdict.DENY_PRIVATE

    await svc.request_follow(db_session, viewer.id, subject.id)
    assert await visibility.resolve(db_session, viewer.id, subject.id) == Verdict.DENY_PRIVATE

    await svc.approve_follow(db_session, subject.id, viewer.id)
    assert await visibility.resolve(db_session, viewer.id, subject.id) == Verdict.ALLOW
    # Following is directed: the subject still cannot see a private viewer.
    viewer.is_private = True
    assert await visibility.resolve(db_session, subject.id, viewer.id) == Verdict.DENY_PRIVATE


@pytest.mark.asyncio
async def test_block_denies_in_both_directions(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    await svc.block(db_session, a.id, b.id)

    assert await visibility.resolve(db_session, a.id, b.id) == Verdict.DENY_BLOCKED
    assert await visibility.resolve(db_session, b.id, a.id) == Verdict.DENY_BLOCKED


@pytest.mark.asyncio
async def test_banned_subject_hidden_except_from_staff(db_session, make_account) -> None:
    viewer = await make_account()
    subject = await make_account(status=AccountStatus.BANNED)

    assert await visibility.resolve(db_session, viewer.id, subject.id) == Verdict.DENY_BANNED
    assert (
        await visibility.resolve(db_session, viewer.id, subject.id, viewer_is_staff=True)
        == Verdict.ALLOW
    )


@pytest.mark.asyncio
async def test_require_visible_hides_the_reason(db_session, make_account) -> None:
    viewer = await make_account()
    private = await make_account(is_private=True)
    banned = await make_account(status=AccountStatus.BANNED)
    blocker = await make_account()
    await svc.block(db_session, blocker.id, viewer.id)

    messages = set()
    for subject in (private, banned, blocker):
        with pytest.raises(UserHidden) as exc_info:
            await visibility.require_visible(db_session, viewer.id, subject.id)
        messages.add((exc_info.value.status_code, exc_info.value.detail))
    assert messages == {(404, "User not found.")}


@pytest.mark.asyncio
async def test_resolve_unknown_subject(db_session, make_account) -> None:
    viewer = await make_account()
    with pytest.raises(UserNotFound):
        await visibility.resolve(db_session, viewer.id, uuid.uuid4())
