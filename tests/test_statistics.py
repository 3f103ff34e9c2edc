"""
Tests for services/statistics_service.py: general average, ranking, class and subject statistics.
"""

import pytest

from models.grades import Grade
from models.statistics import Statistics
from models.subjects import Subject
from services.errors import InvalidInputError, NotFoundError
from services.mentions import NOT_EVALUATED
from services.statistics_service import StatisticsService, general_average, rank_entries

from conftest import YEAR


@pytest.fixture
def stats(store):
    return StatisticsService(store)


def _grade(average, subject_coefficient, override=None):
    return Grade(average=average, coefficient=override, subject=Subject(coefficient=subject_coefficient))


class TestGeneralAverage:

    def test_weighted_by_coefficient(self):
        average, completed, total = general_average([_grade(16, 3), _grade(10, 1)])
        assert average == pytest.approx(14.5)
        assert (completed, total) == (2, 2)

    def test_undetermined_subjects_are_excluded(self):
        average, completed, total = general_average([_grade(16, 3), _grade(None, 5)])
        assert average == pytest.approx(16)
        assert (completed, total) == (1, 2)

    def test_grade_override_beats_subject_coefficient(self):
        average, _, _ = general_average([_grade(16, 1, override=3), _grade(8, 1)])
        assert average == pytest.approx(14)

    def test_nothing_computable(self):
        assert general_average([_grade(None, 2)]) == (None, 0, 1)
        assert general_average([]) == (None, 0, 0)


class TestRankEntries:

    @staticmethod
    def _row(student_id, last_name, average):
        return {"student_id": student_id, "last_name": last_name, "first_name": "", "average": average}

    def test_ties_share_rank_and_next_rank_is_skipped(self):
        rows = rank_entries([
            self._row(1, "D", 12.0),
            self._row(2, "C", 14.0),
            self._row(3, "B", 15.0),
            self._row(4, "A", 14.0),
        ])
        assert [(r["student_id"], r["rank"]) for r in rows] == [(3, 1), (4, 2), (2, 2), (1, 4)]

    def test_unranked_students_go_last(self):
        rows = rank_entries([self._row(1, "A", None), self._row(2, "B", 9.5)])
        assert [(r["student_id"], r["rank"]) for r in rows] == [(2, 1), (1, None)]

    def test_higher_average_always_has_better_rank(self):
        averages = [11.0, 9.0, 11.0, 17.5, 3.0, 17.5, 10.0]
        rows = rank_entries([self._row(i, str(i), a) for i, a in enumerate(averages)])
        for a in rows:
            for b in rows:
                if a["average"] > b["average"]:
                    assert a["rank"] < b["rank"]

    def test_empty(self):
        assert rank_entries([]) == []


class TestSeededCohort:

    def test_subject_averages_follow_the_formula(self, graded_school, store):
        grades = store.find("first", YEAR, class_id=graded_school["class_a"].id)
        assert len(grades) == 6
        for g in grades:
            assert g.average == round((g.interrogation1 + g.interrogation2 + 2 * g.composition) / 3, 2)

    def test_general_averages_tie(self, graded_school, store):
        s = graded_school["students"]
        by_student = store.find_for_students([st.id for st in s.values()], "first", YEAR)
        averages = {name: general_average(by_student[st.id])[0] for name, st in s.items()}
        assert averages["ama"] == pytest.approx(16.0)
        assert averages["kodjo"] == pytest.approx(11.0)
        assert averages["afi"] == pytest.approx(11.0)
        assert averages["yao"] is None


class TestStudentStatistics:

    def test_top_student(self, graded_school, stats):
        ama = graded_school["students"]["ama"]
        result = stats.compute_student_statistics(ama.id, "first", YEAR)
        assert result["average"] == 16.0
        assert result["rank"] == 1
        assert result["mention"] == "Excellent"
        assert result["class_average"] == 12.67
        assert result["min_score"] == 11.0
        assert result["max_score"] == 16.0
        assert result["total_subjects"] == 2
        assert result["completed_subjects"] == 2
        assert result["total_students"] == 4

    def test_tied_students_share_rank(self, graded_school, stats):
        s = graded_school["students"]
        kodjo = stats.compute_student_statistics(s["kodjo"].id, "first", YEAR)
        afi = stats.compute_student_statistics(s["afi"].id, "first", YEAR)
        assert kodjo["average"] == afi["average"] == 11.0
        assert kodjo["rank"] == afi["rank"] == 2
        assert kodjo["mention"] == "Assez Bien"

    def test_student_without_grades(self, graded_school, stats):
        result = stats.compute_student_statistics(graded_school["students"]["yao"].id, "first", YEAR)
        assert result["average"] == 0.0
        assert result["rank"] is None
        assert result["mention"] == NOT_EVALUATED
        assert result["completed_subjects"] == 0
        assert result["class_average"] == 0.0

    def test_student_with_only_undetermined_subjects_sees_class_figures(self, graded_school, store, stats):
        yao, math = graded_school["students"]["yao"], graded_school["subjects"]["math"]
        store.upsert(yao.id, math.id, "first", YEAR, interrogation1=12)
        result = stats.compute_student_statistics(yao.id, "first", YEAR)
        assert result["average"] == 0.0
        assert result["rank"] is None
        assert result["mention"] == NOT_EVALUATED
        assert result["total_subjects"] == 1
        assert result["completed_subjects"] == 0
        assert result["class_average"] == 12.67
        assert result["min_score"] == 11.0
        assert result["max_score"] == 16.0

    def test_incomplete_subject_does_not_count(self, graded_school, store, stats):
        ama, eps = graded_school["students"]["ama"], graded_school["subjects"]["eps"]
        store.upsert(ama.id, eps.id, "first", YEAR, interrogation1=2)
        result = stats.compute_student_statistics(ama.id, "first", YEAR)
        assert result["average"] == 16.0
        assert result["total_subjects"] == 3
        assert result["completed_subjects"] == 2

    def test_snapshot_is_upserted(self, graded_school, stats, db):
        ama = graded_school["students"]["ama"]
        first = stats.compute_student_statistics(ama.id, "first", YEAR)
        second = stats.compute_student_statistics(ama.id, "first", YEAR)
        assert first == second

        snapshots = db.query(Statistics).filter(Statistics.student_id == ama.id).all()
        assert len(snapshots) == 1
        assert snapshots[0].average == 16.0
        assert snapshots[0].rank == 1

    def test_snapshot_follows_grade_changes(self, graded_school, store, stats, db):
        ama, math = graded_school["students"]["ama"], graded_school["subjects"]["math"]
        stats.compute_student_statistics(ama.id, "first", YEAR)
        store.upsert(ama.id, math.id, "first", YEAR, composition=2)
        result = stats.compute_student_statistics(ama.id, "first", YEAR)

        snapshot = db.query(Statistics).filter(Statistics.student_id == ama.id).one()
        assert snapshot.average == result["average"]
        assert result["average"] < 16.0

    def test_unknown_student(self, school, stats):
        with pytest.raises(NotFoundError):
            stats.compute_student_statistics(999, "first", YEAR)

    def test_bad_trimester(self, school, stats):
        with pytest.raises(InvalidInputError):
            stats.compute_student_statistics(school["students"]["ama"].id, "summer", YEAR)


class TestClassStatistics:

    def test_ranked_class(self, graded_school, stats):
        result = stats.compute_class_statistics(graded_school["class_a"].id, "first", YEAR)
        assert result["total_students"] == 4
        assert result["evaluated_students"] == 3
        assert result["class_average"] == 12.67
        assert result["min_score"] == 11.0
        assert result["max_score"] == 16.0
        assert result["success_rate"] == 100.0
        assert [(r["last_name"], r["rank"]) for r in result["students"]] == [
            ("Mensah", 1), ("Agbeko", 2), ("Lawson", 2), ("Dossou", None),
        ]

    def test_every_member_gets_a_snapshot(self, graded_school, stats, db):
        stats.compute_class_statistics(graded_school["class_a"].id, "first", YEAR)
        assert db.query(Statistics).count() == 4

    def test_empty_class(self, school, stats):
        result = stats.compute_class_statistics(school["class_b"].id, "first", YEAR)
        assert result["class_average"] == 0.0
        assert result["min_score"] == 0.0
        assert result["max_score"] == 0.0
        assert result["students"] == []

    def test_class_without_grades(self, school, stats):
        result = stats.compute_class_statistics(school["class_a"].id, "first", YEAR)
        assert result["class_average"] == 0.0
        assert all(r["rank"] is None for r in result["students"])

    def test_unknown_class(self, school, stats):
        with pytest.raises(NotFoundError):
            stats.compute_class_statistics(999, "first", YEAR)


class TestSubjectStatistics:

    def test_math(self, graded_school, stats):
        result = stats.compute_subject_statistics(
            graded_school["subjects"]["math"].id, graded_school["class_a"].id, "first", YEAR
        )
        assert result["average"] == 15.11
        assert result["min_score"] == 12.0
        assert result["max_score"] == 17.33
        assert result["success_rate"] == 100.0
        assert result["evaluated_students"] == 3
        assert result["total_students"] == 4

    def test_success_rate_uses_pass_mark(self, graded_school, stats):
        result = stats.compute_subject_statistics(
            graded_school["subjects"]["fr"].id, graded_school["class_a"].id, "first", YEAR
        )
        assert result["average"] == 10.22
        assert result["success_rate"] == 66.67

    def test_no_grades(self, school, stats):
        result = stats.compute_subject_statistics(
            school["subjects"]["eps"].id, school["class_a"].id, "first", YEAR
        )
        assert result["average"] == 0.0
        assert result["evaluated_students"] == 0


class TestLevelRanking:

    def test_college_ranking(self, graded_school, stats):
        result = stats.compute_level_ranking("college", "first", YEAR)
        assert result["total_students"] == 4
        assert result["ranking"][0]["last_name"] == "Mensah"
        assert result["ranking"][0]["class_name"] == "6e A"

    def test_unknown_level(self, school, stats):
        with pytest.raises(InvalidInputError):
            stats.compute_level_ranking("universite", "first", YEAR)
