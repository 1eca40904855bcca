"""
Dashboard statistics and the admin activity feed.
"""

from unistudious_backend.model.notification import Notification
from unistudious_backend.model.resource import Resource
from unistudious_backend.tests.fixtures import auth_headers, data


class TestAdminDashboard:

    def test_counts(self, client, session, admin, professor, student, other_student, make_course):
        make_course(professor, [student, other_student])
        session.add(Resource(title="Slides", url="https://example.com/s.pdf", uploaded_by_professor_id=professor.id))
        session.commit()

        stats = data(client.get("/api/dashboard/admin", headers=auth_headers(admin)))
        assert stats["total_users"] == 4
        assert stats["total_students"] == 2
        assert stats["total_professors"] == 1
        assert stats["total_courses"] == 1
        assert stats["total_resources"] == 1
        assert stats["total_events"] == 0

    def test_admin_only(self, client, professor, student):
        for principal in (professor, student):
            assert client.get("/api/dashboard/admin", headers=auth_headers(principal)).status_code == 403
            assert client.get("/api/dashboard/activity", headers=auth_headers(principal)).status_code == 403

    def test_activity_feed(self, client, admin, professor, make_course):
        make_course(professor, name="Optics")

        feed = data(client.get("/api/dashboard/activity?limit=3", headers=auth_headers(admin)))
        assert len(feed) == 3
        assert {item["type"] for item in feed} <= {"user_created", "course_created", "course_updated"}
        assert any(item["title"] == "New course created: Optics" for item in feed)

    def test_activity_limit_bounds(self, client, admin):
        assert client.get("/api/dashboard/activity?limit=0", headers=auth_headers(admin)).status_code == 400


class TestProfessorDashboard:

    def test_counts_enrollments_per_course(self, client, session, professor, student, other_student, make_course):
        make_course(professor, [student, other_student], name="Algebra")
        make_course(professor, [student], name="Geometry")
        session.add(Notification(title="Hi", recipient_id=professor.id))
        session.commit()

        stats = data(client.get("/api/dashboard/prof", headers=auth_headers(professor)))
        assert stats["total_courses"] == 2
        assert stats["total_students"] == 3
        assert stats["total_resources"] == 0
        assert stats["total_notifications"] == 1

    def test_professor_only(self, client, admin, student):
        # admins pass every policy check
        assert client.get("/api/dashboard/prof", headers=auth_headers(admin)).status_code == 200
        assert client.get("/api/dashboard/prof", headers=auth_headers(student)).status_code == 403
