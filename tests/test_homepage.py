"""
tests.test_homepage
~~~~~~~~~~~~~~~~~~~
pytest-django test suite for the homepage service.

Covers:
- recency helpers          (unit, no DB)
- Git branch visibility    (unit, no DB)
- get_all_applications     (service, DB)
- users services           (service, DB)
- API Endpoints            (integration, DB)
"""
from __future__ import annotations

import httpx
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APIClient
from structlog.testing import capture_logs

from common.exceptions import NotSignedInError
from apps.applications.models import Application, Page
from apps.applications.visibility import (
    application_id_for_response,
    is_homepage_visible,
)
from apps.homepage.services.application_fetcher import get_all_applications
from apps.homepage.services.recency import (
    prioritise_ids,
    sort_by_recency,
    touch_recent,
)
from apps.release_notes.services import ReleaseNotesService
from apps.users import services as user_services
from apps.users.models import UserData
from apps.workspaces.models import Workspace, WorkspaceMembership

User = get_user_model()

FEED_URL = "https://cs.example.com/api/v1/release-notes"

FEED_PAYLOAD = {
    "data": {
        "nodes": [
            {"tagName": "v1.6.2", "name": "v1.6.2", "url": "https://example.com/v1.6.2"},
            {"tagName": "v1.6.1", "name": "v1.6.1", "url": "https://example.com/v1.6.1"},
            {"tagName": "v1.6.0", "name": "v1.6.0", "url": "https://example.com/v1.6.0"},
        ]
    }
}


# ===========================================================================
# Helpers & fixtures
# ===========================================================================

def feed_service(handler) -> ReleaseNotesService:
    """A ReleaseNotesService whose HTTP calls are answered by *handler*."""
    return ReleaseNotesService(base_url=FEED_URL, transport=httpx.MockTransport(handler))


def add_workspace(name: str, *members, role=WorkspaceMembership.Role.DEVELOPER) -> Workspace:
    workspace = Workspace.objects.create(name=name)
    for member in members:
        WorkspaceMembership.objects.create(workspace=workspace, user=member, role=role)
    return workspace


def add_app(workspace: Workspace, name: str, git_metadata: dict | None = None) -> Application:
    return Application.objects.create(workspace=workspace, name=name, git_metadata=git_metadata)


def app_names(group) -> list[str]:
    return [app.name for app in group.applications]


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        username="alice",
        email="alice@example.com",
        password="pw",
        first_name="Alice",
        last_name="Doe",
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username="bob", email="bob@example.com", password="pw")


@pytest.fixture
def api_client(user) -> APIClient:
    """A DRF APIClient authenticated as ``user``."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ===========================================================================
# TestRecency  (unit — no DB)
# ===========================================================================

class TestRecency:

    def test_prioritise_puts_recent_first_then_rest_in_order(self):
        assert prioritise_ids([3, 1], [1, 2, 3, 4]) == [3, 1, 2, 4]

    def test_prioritise_without_recent_keeps_input_order(self):
        assert prioritise_ids(None, [5, 2, 9]) == [5, 2, 9]
        assert prioritise_ids([], [5, 2, 9]) == [5, 2, 9]

    def test_prioritise_removes_duplicates(self):
        assert prioritise_ids([2, 2, 1], [1, 2, 1]) == [2, 1]

    def test_sort_unknown_ids_last_and_stable(self):
        items = [{"id": i} for i in (10, 20, 30, 40, 50)]
        result = sort_by_recency(items, [40, 20], key=lambda i: i["id"])
        assert [i["id"] for i in result] == [40, 20, 10, 30, 50]

    def test_sort_without_recent_returns_input_order(self):
        items = [3, 1, 2]
        assert sort_by_recency(items, [], key=lambda i: i) == [3, 1, 2]
        assert sort_by_recency(items, None, key=lambda i: i) == [3, 1, 2]

    def test_sort_duplicate_recent_id_uses_last_position(self):
        # 1 appears at index 0 and 2; its rank is 2, after 5 (rank 1).
        result = sort_by_recency([1, 5], [1, 5, 1], key=lambda i: i)
        assert result == [5, 1]

    def test_sort_does_not_mutate_input(self):
        items = [1, 2, 3]
        sort_by_recency(items, [3], key=lambda i: i)
        assert items == [1, 2, 3]

    def test_touch_moves_to_front_and_dedupes(self):
        assert touch_recent([1, 2, 3, 2], 3, limit=10) == [3, 1, 2]

    def test_touch_truncates_to_limit(self):
        assert touch_recent([1, 2, 3], 4, limit=3) == [4, 1, 2]

    def test_touch_on_empty_list(self):
        assert touch_recent(None, 7, limit=3) == [7]


# ===========================================================================
# TestVisibility  (unit — no DB)
# ===========================================================================

class TestVisibility:

    def test_not_git_connected_is_visible(self):
        assert is_homepage_visible(None) is True

    def test_failed_connect_without_branches_is_visible(self):
        assert is_homepage_visible({}) is True
        assert is_homepage_visible({"remoteUrl": "git@example.com:a/b.git"}) is True
        assert is_homepage_visible({"branchName": "", "defaultBranchName": None}) is True

    def test_default_branch_is_visible(self):
        assert is_homepage_visible({"branchName": "main", "defaultBranchName": "main"}) is True

    def test_feature_branch_is_hidden(self):
        assert is_homepage_visible({"branchName": "feat", "defaultBranchName": "main"}) is False

    def test_missing_default_branch_name_is_hidden(self):
        assert is_homepage_visible({"branchName": "feat"}) is False

    def test_missing_branch_name_is_hidden(self):
        assert is_homepage_visible({"defaultBranchName": "main"}) is False

    def test_response_id_uses_default_application_id(self):
        meta = {"branchName": "main", "defaultBranchName": "main", "defaultApplicationId": 7}
        assert application_id_for_response(12, meta) == 7

    def test_response_id_falls_back_to_row_id(self):
        assert application_id_for_response(12, None) == 12
        assert application_id_for_response(12, {"branchName": "main"}) == 12


# ===========================================================================
# TestApplicationFetcher  (service — DB)
# ===========================================================================

@pytest.mark.django_db
class TestApplicationFetcher:

    def test_anonymous_user_rejected(self):
        with pytest.raises(NotSignedInError):
            get_all_applications(AnonymousUser())

    def test_missing_user_rejected(self):
        with pytest.raises(NotSignedInError):
            get_all_applications(None)

    def test_user_without_workspaces_gets_empty_homepage(self, user):
        homepage = get_all_applications(user)
        assert homepage.user == user
        assert homepage.workspace_applications == []
        assert homepage.release_items == []
        assert homepage.new_releases_count == ""

    def test_workspaces_of_other_users_not_listed(self, user, other_user):
        add_workspace("Mine", user)
        add_workspace("Theirs", other_user)
        homepage = get_all_applications(user)
        assert [g.workspace.name for g in homepage.workspace_applications] == ["Mine"]

    def test_workspaces_in_membership_order_without_recency(self, user):
        add_workspace("First", user)
        add_workspace("Second", user)
        add_workspace("Third", user)
        homepage = get_all_applications(user)
        assert [g.workspace.name for g in homepage.workspace_applications] == [
            "First", "Second", "Third",
        ]

    def test_recent_workspaces_first_and_unknown_ids_skipped(self, user, other_user):
        first = add_workspace("First", user)
        add_workspace("Second", user)
        third = add_workspace("Third", user)
        foreign = add_workspace("Foreign", other_user)
        UserData.objects.create(
            user=user,
            recently_used_workspace_ids=[third.id, 987654, foreign.id, first.id],
        )

        homepage = get_all_applications(user)

        assert [g.workspace.name for g in homepage.workspace_applications] == [
            "Third", "First", "Second",
        ]

    def test_workspace_without_applications_kept(self, user):
        add_workspace("Empty", user)
        homepage = get_all_applications(user)
        assert len(homepage.workspace_applications) == 1
        assert homepage.workspace_applications[0].applications == []

    def test_applications_sorted_by_recency(self, user):
        ws = add_workspace("Acme", user)
        a1 = add_app(ws, "one")
        add_app(ws, "two")
        a3 = add_app(ws, "three")
        add_app(ws, "four")
        UserData.objects.create(user=user, recently_used_app_ids=[a3.id, a1.id])

        homepage = get_all_applications(user)

        assert app_names(homepage.workspace_applications[0]) == ["three", "one", "two", "four"]

    def test_applications_grouped_by_their_workspace(self, user):
        ws_a = add_workspace("A", user)
        ws_b = add_workspace("B", user)
        add_app(ws_a, "a-1")
        b1 = add_app(ws_b, "b-1")
        add_app(ws_a, "a-2")
        UserData.objects.create(user=user, recently_used_app_ids=[b1.id])

        homepage = get_all_applications(user)

        groups = {g.workspace.name: app_names(g) for g in homepage.workspace_applications}
        assert groups == {"A": ["a-1", "a-2"], "B": ["b-1"]}

    def test_git_branch_copies_filtered(self, user):
        ws = add_workspace("Acme", user)
        add_app(ws, "plain")
        add_app(ws, "main", {"branchName": "main", "defaultBranchName": "main"})
        add_app(ws, "feature", {"branchName": "feat", "defaultBranchName": "main"})
        add_app(ws, "broken-connect", {"remoteUrl": "git@example.com:acme/app.git"})
        add_app(ws, "no-default", {"branchName": "hotfix"})

        homepage = get_all_applications(user)

        assert app_names(homepage.workspace_applications[0]) == [
            "plain", "main", "broken-connect",
        ]

    def test_git_application_exposes_default_application_id(self, user):
        ws = add_workspace("Acme", user)
        app = add_app(
            ws,
            "main",
            {"branchName": "main", "defaultBranchName": "main", "defaultApplicationId": 4242},
        )
        homepage = get_all_applications(user)
        listed = homepage.workspace_applications[0].applications[0]
        assert listed.id == 4242
        assert listed.row_id == app.id

    def test_user_roles_attached(self, user, other_user):
        ws = add_workspace("Acme", user, role=WorkspaceMembership.Role.ADMINISTRATOR)
        WorkspaceMembership.objects.create(
            workspace=ws, user=other_user, role=WorkspaceMembership.Role.VIEWER
        )

        homepage = get_all_applications(user)

        assert homepage.workspace_applications[0].user_roles == [
            {"username": "alice", "name": "Alice Doe", "role": "administrator"},
            {"username": "bob", "name": "", "role": "viewer"},
        ]

    def test_default_page_slugs_filled(self, user):
        ws = add_workspace("Acme", user)
        app = add_app(ws, "crm")
        home = Page.objects.create(
            application=app, unpublished_name="Home Draft", published_name="Home"
        )
        other = Page.objects.create(application=app, unpublished_name="Other")
        app.pages = [{"id": other.id, "isDefault": False}, {"id": home.id, "isDefault": True}]
        app.published_pages = [{"id": home.id, "isDefault": True}]
        app.save()

        homepage = get_all_applications(user)

        listed = homepage.workspace_applications[0].applications[0]
        assert [p.slug for p in listed.pages] == ["", "home-draft"]
        assert listed.published_pages[0].slug == "home"

    def test_unpublished_default_page_leaves_published_slug_empty(self, user):
        ws = add_workspace("Acme", user)
        app = add_app(ws, "crm")
        draft = Page.objects.create(application=app, unpublished_name="Draft")
        app.pages = [{"id": draft.id, "isDefault": True}]
        app.published_pages = [{"id": draft.id, "isDefault": True}]
        app.save()

        with capture_logs() as logs:
            homepage = get_all_applications(user)

        listed = homepage.workspace_applications[0].applications[0]
        assert listed.pages[0].slug == "draft"
        assert listed.published_pages[0].slug == ""
        missing = [e for e in logs if e["event"] == "homepage_page_version_missing"]
        assert len(missing) == 1
        assert missing[0]["log_level"] == "error"
        assert missing[0]["page_id"] == draft.id
        assert missing[0]["field"] == "published_slug"

    def test_dangling_page_reference_tolerated(self, user):
        ws = add_workspace("Acme", user)
        app = add_app(ws, "crm")
        Page.objects.create(application=app, unpublished_name="Real")
        app.pages = [{"id": 987654, "isDefault": True}]
        app.save()
        pageless = add_app(ws, "pageless")
        pageless.pages = [{"id": 1234, "isDefault": True}]
        pageless.save()

        with capture_logs() as logs:
            homepage = get_all_applications(user)

        for listed in homepage.workspace_applications[0].applications:
            assert listed.pages[0].slug == ""

        errors = {e["event"]: e for e in logs if e["log_level"] == "error"}
        assert errors["homepage_default_page_not_found"]["application_id"] == app.id
        assert errors["homepage_default_page_not_found"]["page_id"] == 987654
        assert errors["homepage_no_pages_for_application"]["application_id"] == pageless.id

    def test_release_notes_attached_with_new_count(self, user):
        UserData.objects.create(user=user, release_notes_viewed_version="v1.6.0")
        service = feed_service(lambda request: httpx.Response(200, json=FEED_PAYLOAD))

        homepage = get_all_applications(user, release_notes=service)

        assert [n.tag_name for n in homepage.release_items] == ["v1.6.2", "v1.6.1", "v1.6.0"]
        assert homepage.new_releases_count == "2"

    def test_unknown_viewed_version_counts_all_releases(self, user):
        UserData.objects.create(user=user, release_notes_viewed_version="v0.9.0")
        service = feed_service(lambda request: httpx.Response(200, json=FEED_PAYLOAD))

        homepage = get_all_applications(user, release_notes=service)

        assert homepage.new_releases_count == "3+"

    def test_first_visit_shows_no_badge(self, user):
        service = feed_service(lambda request: httpx.Response(200, json=FEED_PAYLOAD))
        homepage = get_all_applications(user, release_notes=service)
        assert len(homepage.release_items) == 3
        assert homepage.new_releases_count == ""

    def test_latest_version_seen_shows_no_badge(self, user):
        UserData.objects.create(user=user, release_notes_viewed_version="v1.6.2")
        service = feed_service(lambda request: httpx.Response(200, json=FEED_PAYLOAD))
        homepage = get_all_applications(user, release_notes=service)
        assert homepage.new_releases_count == ""

    def test_release_notes_failure_does_not_fail_homepage(self, user):
        add_workspace("Acme", user)

        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        homepage = get_all_applications(user, release_notes=feed_service(unreachable))

        assert homepage.release_items == []
        assert homepage.new_releases_count == ""
        assert len(homepage.workspace_applications) == 1

    def test_unreachable_cache_backend_does_not_fail_homepage(self, user, settings):
        settings.CACHES = {
            "default": {
                "BACKEND": "django.core.cache.backends.redis.RedisCache",
                "LOCATION": "redis://127.0.0.1:1/0",
            }
        }
        UserData.objects.create(user=user, release_notes_viewed_version="v1.6.0")
        add_workspace("Acme", user)
        service = feed_service(lambda request: httpx.Response(200, json=FEED_PAYLOAD))

        homepage = get_all_applications(user, release_notes=service)

        assert [node.tag_name for node in homepage.release_items] == [
            "v1.6.2",
            "v1.6.1",
            "v1.6.0",
        ]
        assert len(homepage.workspace_applications) == 1

    def test_unexpected_release_notes_error_does_not_fail_homepage(self, user):
        class BrokenReleaseNotes(ReleaseNotesService):
            def get_release_nodes(self):
                raise RuntimeError("boom")

        add_workspace("Acme", user)

        with capture_logs() as logs:
            homepage = get_all_applications(user, release_notes=BrokenReleaseNotes())

        assert homepage.release_items == []
        assert homepage.new_releases_count == ""
        assert len(homepage.workspace_applications) == 1
        assert any(e["event"] == "homepage_release_notes_failed" for e in logs)

    def test_first_visit_records_viewed_version(self, user, settings):
        get_all_applications(user)
        assert UserData.objects.get(user=user).release_notes_viewed_version == settings.APP_VERSION

    def test_existing_viewed_version_kept(self, user):
        UserData.objects.create(user=user, release_notes_viewed_version="v1.0.0")
        get_all_applications(user)
        assert UserData.objects.get(user=user).release_notes_viewed_version == "v1.0.0"


# ===========================================================================
# TestUserServices  (service — DB)
# ===========================================================================

@pytest.mark.django_db
class TestUserServices:

    def test_get_for_user_returns_unsaved_default(self, user):
        user_data = user_services.get_for_user(user)
        assert user_data.pk is None
        assert user_data.recently_used_app_ids == []
        assert user_data.recently_used_workspace_ids == []
        assert user_data.release_notes_viewed_version is None
        assert not UserData.objects.filter(user=user).exists()

    def test_record_recent_application(self, user):
        ws_a = add_workspace("A", user)
        ws_b = add_workspace("B", user)
        a1 = add_app(ws_a, "a1")
        b1 = add_app(ws_b, "b1")

        user_services.record_recent_application(user, a1)
        user_services.record_recent_application(user, b1)
        user_services.record_recent_application(user, a1)

        user_data = UserData.objects.get(user=user)
        assert user_data.recently_used_app_ids == [a1.id, b1.id]
        assert user_data.recently_used_workspace_ids == [ws_a.id, ws_b.id]

    def test_record_recent_application_capped(self, user, settings):
        settings.RECENTLY_USED_LIMIT = 2
        ws = add_workspace("A", user)
        apps = [add_app(ws, f"app-{i}") for i in range(4)]
        for app in apps:
            user_services.record_recent_application(user, app)

        user_data = UserData.objects.get(user=user)
        assert user_data.recently_used_app_ids == [apps[3].id, apps[2].id]

    def test_record_recent_git_branch_uses_default_application_id(self, user):
        ws = add_workspace("A", user)
        branch = add_app(
            ws,
            "feature",
            {"branchName": "feat", "defaultBranchName": "main", "defaultApplicationId": 99},
        )
        user_services.record_recent_application(user, branch)
        assert UserData.objects.get(user=user).recently_used_app_ids == [99]


# ===========================================================================
# TestAPIEndpoints  (integration — DB)
# ===========================================================================

HOME_URL = "/api/v1/applications/home/"
WORKSPACES_URL = "/api/v1/workspaces/"


def recent_url(application_id):
    return f"/api/v1/applications/{application_id}/recent/"


def workspace_url(workspace_id):
    return f"/api/v1/workspaces/{workspace_id}/"


@pytest.mark.django_db
class TestAPIEndpoints:

    # ── GET /applications/home/ ─────────────────────────────────────────────

    def test_home_requires_sign_in(self, db):
        resp = APIClient().get(HOME_URL)
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED
        assert resp.json()["code"] == "user_not_signed_in"

    def test_home_payload_shape(self, api_client, user):
        ws = add_workspace("Acme", user, role=WorkspaceMembership.Role.ADMINISTRATOR)
        app = add_app(ws, "Sales Dashboard")
        page = Page.objects.create(
            application=app, unpublished_name="Overview", published_name="Overview"
        )
        app.pages = [{"id": page.id, "isDefault": True}]
        app.published_pages = [{"id": page.id, "isDefault": True}]
        app.save()

        resp = api_client.get(HOME_URL)

        assert resp.status_code == status.HTTP_200_OK
        body = resp.json()
        assert body["user"]["username"] == "alice"
        assert body["user"]["name"] == "Alice Doe"
        assert body["release_items"] == []
        assert body["new_releases_count"] == ""

        group = body["workspace_applications"][0]
        assert group["workspace"]["id"] == ws.id
        assert group["workspace"]["slug"] == "acme"
        assert group["user_roles"] == [
            {"username": "alice", "name": "Alice Doe", "role": "administrator"}
        ]
        listed = group["applications"][0]
        assert listed["id"] == str(app.id)
        assert listed["slug"] == "sales-dashboard"
        assert listed["git_metadata"] is None
        assert listed["pages"] == [{"id": str(page.id), "is_default": True, "slug": "overview"}]
        assert listed["published_pages"][0]["slug"] == "overview"

    def test_request_id_echoed(self, api_client):
        resp = api_client.get(HOME_URL, HTTP_X_REQUEST_ID="req-123")
        assert resp["X-Request-ID"] == "req-123"

    def test_request_id_generated_when_absent(self, api_client):
        resp = api_client.get(HOME_URL)
        assert resp["X-Request-ID"]

    # ── POST /applications/{id}/recent/ ─────────────────────────────────────

    def test_recent_reorders_home(self, api_client, user):
        first = add_workspace("First", user)
        second = add_workspace("Second", user)
        add_app(first, "f-1")
        s1 = add_app(second, "s-1")
        add_app(second, "s-2")
        s3 = add_app(second, "s-3")

        assert api_client.post(recent_url(s1.id)).status_code == status.HTTP_204_NO_CONTENT
        assert api_client.post(recent_url(s3.id)).status_code == status.HTTP_204_NO_CONTENT

        body = api_client.get(HOME_URL).json()
        groups = body["workspace_applications"]
        assert [g["workspace"]["name"] for g in groups] == ["Second", "First"]
        assert [a["name"] for a in groups[0]["applications"]] == ["s-3", "s-1", "s-2"]

    def test_recent_requires_sign_in(self, user):
        ws = add_workspace("Acme", user)
        app = add_app(ws, "crm")
        resp = APIClient().post(recent_url(app.id))
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_recent_forbidden_for_non_member(self, api_client, other_user):
        ws = add_workspace("Theirs", other_user)
        app = add_app(ws, "crm")
        resp = api_client.post(recent_url(app.id))
        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert resp.json()["code"] == "permission_denied"

    def test_recent_unknown_application_404(self, api_client):
        assert api_client.post(recent_url(987654)).status_code == status.HTTP_404_NOT_FOUND
        assert api_client.post(recent_url("not-an-id")).status_code == status.HTTP_404_NOT_FOUND

    # ── /workspaces/ ────────────────────────────────────────────────────────

    def test_create_workspace_201(self, api_client, user):
        resp = api_client.post(WORKSPACES_URL, data={"name": "New Workspace"}, format="json")
        assert resp.status_code == status.HTTP_201_CREATED
        body = resp.json()
        assert body["name"] == "New Workspace"
        assert body["slug"] == "new-workspace"
        membership = WorkspaceMembership.objects.get(workspace_id=body["id"])
        assert membership.user == user
        assert membership.role == WorkspaceMembership.Role.ADMINISTRATOR

    def test_create_workspace_duplicate_409(self, api_client, user):
        add_workspace("Acme", user)
        resp = api_client.post(WORKSPACES_URL, data={"name": "Acme"}, format="json")
        assert resp.status_code == status.HTTP_409_CONFLICT
        assert "already exists" in resp.json()["detail"]

    def test_create_workspace_blank_name_400(self, api_client):
        resp = api_client.post(WORKSPACES_URL, data={"name": ""}, format="json")
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_workspace_requires_sign_in(self, db):
        resp = APIClient().post(WORKSPACES_URL, data={"name": "Acme"}, format="json")
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_workspace_detail_by_id_and_slug(self, api_client, user):
        ws = add_workspace("Acme Corp", user)
        for key in (ws.id, ws.slug):
            resp = api_client.get(workspace_url(key))
            assert resp.status_code == status.HTTP_200_OK
            body = resp.json()
            assert body["workspace"]["id"] == ws.id
            assert body["user_roles"][0]["username"] == "alice"

    def test_workspace_detail_forbidden_for_non_member(self, api_client, other_user):
        ws = add_workspace("Theirs", other_user)
        resp = api_client.get(workspace_url(ws.id))
        assert resp.status_code == status.HTTP_403_FORBIDDEN

    def test_workspace_detail_404(self, api_client):
        resp = api_client.get(workspace_url("nope"))
        assert resp.status_code == status.HTTP_404_NOT_FOUND
        assert resp.json()["code"] == "not_found"

    # ── /health/ ────────────────────────────────────────────────────────────

    def test_health_ok(self, db, settings):
        resp = APIClient().get("/health/")
        assert resp.status_code == status.HTTP_200_OK
        assert resp.json() == {
            "status": "ok",
            "db": "ok",
            "cache": "ok",
            "version": settings.APP_VERSION,
        }
