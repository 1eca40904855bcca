"""
Course visibility, ownership and enrollment through the HTTP surface.
"""

from datetime import datetime

from sqlalchemy import func

from unistudious_backend.model.calendar import CalendarEvent
from unistudious_backend.model.course import Course, course_student
from unistudious_backend.model.notification import Notification
from unistudious_backend.model.resource import Resource
from unistudious_backend.tests.fixtures import auth_headers, data, error


def enrollment_count(session, course_id: str) -> int:
    return session.query(func.count()).select_from(course_student).filter(course_student.c.course_id == course_id).scalar()


class TestCourseVisibility:

    def test_can_read_only_own_courses(self, client, professor, other_professor, student, other_student, admin, make_course):
        course = make_course(professor, [student])

        for principal in (professor, student, admin):
            assert client.get(f"/api/courses/{course.id}", headers=auth_headers(principal)).status_code == 200

        for principal in (other_professor, other_student):
            response = client.get(f"/api/courses/{course.id}", headers=auth_headers(principal))
            assert response.status_code == 403
            error(response)

    def test_list_is_filtered(self, client, professor, other_professor, student, make_course):
        mine = make_course(professor, [student], name="Algebra")
        make_course(other_professor, name="Chemistry")

        response = client.get("/api/courses", headers=auth_headers(professor))
        assert [c["id"] for c in data(response)] == [mine.id]
        assert response.headers["X-Total-Count"] == "1"

        response = client.get("/api/courses/my-courses", headers=auth_headers(student))
        assert [c["id"] for c in data(response)] == [mine.id]

        response = client.get("/api/courses", headers=auth_headers(other_professor))
        assert [c["name"] for c in data(response)] == ["Chemistry"]

    def test_pagination(self, client, professor, make_course):
        for i in range(3):
            make_course(professor, name=f"Course {i}")

        response = client.get("/api/courses?limit=2", headers=auth_headers(professor))
        assert len(data(response)) == 2
        assert response.headers["X-Total-Count"] == "3"

    def test_course_payload(self, client, professor, student, make_course):
        course = make_course(professor, [student])

        payload = data(client.get(f"/api/courses/{course.id}", headers=auth_headers(student)))
        assert payload["teacher_id"] == professor.id
        assert payload["teacher"]["id"] == professor.id
        assert payload["student_ids"] == [student.id]
        assert payload["progress"] == 0


class TestCourseCreation:

    def test_professor_becomes_teacher(self, client, professor, other_professor, student):
        response = client.post("/api/courses", headers=auth_headers(professor), json={
            "name": "Algebra",
            "teacher_id": other_professor.id,
            "student_ids": [student.id],
            "next_lesson": "2025-03-10T08:00:00",
        })

        assert response.status_code == 201
        payload = data(response)
        assert payload["teacher_id"] == professor.id
        assert payload["student_ids"] == [student.id]

    def test_admin_must_name_a_professor(self, client, admin, professor, student):
        missing = client.post("/api/courses", headers=auth_headers(admin), json={"name": "Algebra"})
        assert missing.status_code == 400

        wrong_role = client.post("/api/courses", headers=auth_headers(admin), json={"name": "Algebra", "teacher_id": student.id})
        assert wrong_role.status_code == 400
        assert error(wrong_role)["details"]["invalid"] == [student.id]

        ok = client.post("/api/courses", headers=auth_headers(admin), json={"name": "Algebra", "teacher_id": professor.id})
        assert ok.status_code == 201
        assert data(ok)["teacher_id"] == professor.id

    def test_student_cannot_create(self, client, student):
        response = client.post("/api/courses", headers=auth_headers(student), json={"name": "Algebra"})
        assert response.status_code == 403

    def test_only_students_can_be_enrolled(self, client, professor, other_professor):
        response = client.post("/api/courses", headers=auth_headers(professor),
                               json={"name": "Algebra", "student_ids": [other_professor.id]})
        assert response.status_code == 400

    def test_progress_bounds(self, client, professor):
        for progress, expected in ((-1, 400), (101, 400), (0, 201), (100, 201)):
            response = client.post("/api/courses", headers=auth_headers(professor),
                                   json={"name": "Algebra", "progress": progress})
            assert response.status_code == expected


class TestCourseMutation:

    def test_only_teacher_updates(self, client, professor, other_professor, student, make_course):
        course = make_course(professor, [student])

        ok = client.put(f"/api/courses/{course.id}", headers=auth_headers(professor), json={"progress": 40})
        assert ok.status_code == 200
        assert data(ok)["progress"] == 40

        for principal in (other_professor, student):
            response = client.put(f"/api/courses/{course.id}", headers=auth_headers(principal), json={"progress": 50})
            assert response.status_code == 403

    def test_update_rejects_enrollment_fields(self, client, professor, student, make_course):
        course = make_course(professor)
        response = client.put(f"/api/courses/{course.id}", headers=auth_headers(professor), json={"student_ids": [student.id]})
        assert response.status_code == 400

    def test_only_teacher_deletes(self, client, professor, other_professor, make_course):
        course = make_course(professor)

        assert client.delete(f"/api/courses/{course.id}", headers=auth_headers(other_professor)).status_code == 403

        response = client.delete(f"/api/courses/{course.id}", headers=auth_headers(professor))
        assert response.status_code == 200
        assert data(response) == {"id": course.id}

        assert client.get(f"/api/courses/{course.id}", headers=auth_headers(professor)).status_code == 404

    def test_delete_cascades(self, client, session, professor, student, make_course):
        course = make_course(professor, [student])
        other = make_course(professor, name="Other")

        session.add_all([
            CalendarEvent(title="Lesson", start=datetime(2025, 3, 10, 8), owner_id=professor.id, course_id=course.id, type="class"),
            CalendarEvent(title="Kept", start=datetime(2025, 3, 11, 8), owner_id=professor.id, course_id=other.id, type="class"),
            Resource(title="Slides", url="https://example.com/slides.pdf", type="file", course_id=course.id, uploaded_by_professor_id=professor.id),
            Notification(title="Welcome", recipient_id=student.id, sender_id=professor.id, related_course_id=course.id),
        ])
        session.commit()

        response = client.delete(f"/api/courses/{course.id}", headers=auth_headers(professor))
        assert response.status_code == 200

        session.expire_all()
        assert session.get(Course, course.id) is None
        assert session.query(CalendarEvent).filter(CalendarEvent.course_id == course.id).count() == 0
        assert session.query(CalendarEvent).count() == 1
        assert session.query(Resource).filter(Resource.course_id == course.id).count() == 0
        assert enrollment_count(session, course.id) == 0

        notification = session.query(Notification).one()
        assert notification.related_course_id is None


class TestEnrollment:

    def test_assign_twice_is_idempotent(self, client, session, professor, student, make_course):
        course = make_course(professor)
        headers = auth_headers(professor)

        for _ in range(2):
            response = client.post(f"/api/courses/{course.id}/assign-students", headers=headers,
                                   json={"student_ids": [student.id, student.id]})
            assert response.status_code == 200
            assert data(response)["student_ids"] == [student.id]

        assert enrollment_count(session, course.id) == 1

    def test_assign_then_remove(self, client, session, professor, student, other_student, make_course):
        course = make_course(professor, [student])
        headers = auth_headers(professor)

        response = client.post(f"/api/courses/{course.id}/assign-students", headers=headers, json={"student_ids": [other_student.id]})
        assert sorted(data(response)["student_ids"]) == sorted([student.id, other_student.id])

        response = client.post(f"/api/courses/{course.id}/remove-students", headers=headers, json={"student_ids": [student.id, "not-enrolled"]})
        assert response.status_code == 200
        assert data(response)["student_ids"] == [other_student.id]

    def test_enrolled_student_gains_visibility(self, client, professor, student, make_course):
        course = make_course(professor)

        assert client.get(f"/api/courses/{course.id}", headers=auth_headers(student)).status_code == 403

        client.post(f"/api/courses/{course.id}/assign-students", headers=auth_headers(professor), json={"student_ids": [student.id]})

        assert client.get(f"/api/courses/{course.id}", headers=auth_headers(student)).status_code == 200

    def test_only_teacher_manages_students(self, client, professor, other_professor, student, make_course):
        course = make_course(professor)

        response = client.post(f"/api/courses/{course.id}/assign-students", headers=auth_headers(other_professor),
                               json={"student_ids": [student.id]})
        assert response.status_code == 403

    def test_non_students_rejected(self, client, professor, other_professor, make_course):
        course = make_course(professor)

        response = client.post(f"/api/courses/{course.id}/assign-students", headers=auth_headers(professor),
                               json={"student_ids": [other_professor.id]})
        assert response.status_code == 400
