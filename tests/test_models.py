"""Tests for quiz/models.py — memory row parsing and question serialization."""

from datetime import date, datetime

from quiz.models import MemoryRecord, parse_date


class TestMemoryRecordFromRow:
    def test_basic_row(self, memory_row):
        memory = MemoryRecord.from_row(memory_row)
        assert memory.id == "mem-010"
        assert memory.location == "Grandma's house"
        assert memory.people_involved == ("Helen",)
        assert memory.emotional_context == "cozy"
        assert memory.photo_url is None

    def test_tolerates_missing_fields(self):
        memory = MemoryRecord.from_row({"id": 7})
        assert memory.id == "7"
        assert memory.people_involved == ()
        assert memory.taken_on is None

    def test_people_as_json_string(self):
        memory = MemoryRecord.from_row({"id": "m", "people_involved": '["Ann", " Joe "]'})
        assert memory.people_involved == ("Ann", "Joe")

    def test_people_as_comma_text(self):
        memory = MemoryRecord.from_row({"id": "m", "people_involved": "Ann, Joe,"})
        assert memory.people_involved == ("Ann", "Joe")

    def test_blank_strings_become_none(self):
        memory = MemoryRecord.from_row({"id": "m", "location": "   ", "caption": ""})
        assert memory.location is None
        assert memory.caption is None

    def test_date_objects_are_normalized(self):
        memory = MemoryRecord.from_row({
            "id": "m",
            "date_taken": date(1999, 3, 4),
            "created_at": datetime(2024, 1, 2, 3, 4, 5),
        })
        assert memory.date_taken == "1999-03-04"
        assert memory.taken_on == date(1999, 3, 4)
        assert memory.created_at.startswith("2024-01-02")

    def test_emotion_lowercased(self):
        memory = MemoryRecord.from_row({"id": "m", "emotional_context": "Joyful"})
        assert memory.emotional_context == "joyful"


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2010-06-01") == date(2010, 6, 1)

    def test_iso_datetime_string(self):
        assert parse_date("2010-06-01T12:30:00Z") == date(2010, 6, 1)

    def test_garbage(self):
        assert parse_date("summer of '69") is None

    def test_none(self):
        assert parse_date(None) is None


class TestQuizQuestionSerialization:
    def test_to_dict_with_answer(self, questions):
        data = questions[0].to_dict()
        assert data["correctAnswer"] == "Paris"
        assert data["options"][data["correctIndex"]] == "Paris"
        assert data["category"] == "location"
        assert data["memoryContext"]["location"] == "Paris"

    def test_to_dict_hides_answer(self, questions):
        data = questions[0].to_dict(include_answer=False)
        assert "correctAnswer" not in data
        assert "correctIndex" not in data

    def test_is_correct_is_exact_match(self, questions):
        q = questions[0]
        assert q.is_correct("Paris")
        assert not q.is_correct("paris")
        assert not q.is_correct(None)
