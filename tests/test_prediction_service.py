# /tests/test_prediction_service.py

import asyncio
import json
import pytest
from unittest.mock import AsyncMock
from google.api_core import exceptions as google_exceptions

from app.services.prediction_service import PredictionService, is_fallback, FALLBACK_CONFIDENCE
from app.models.student_model import Student, RiskLevel

# --- Test Data Fixtures ---

def make_student(student_id="stu_1", attendance=95, gpa=3.8, behavior=4.5):
    return Student(
        id=student_id, name=f"Student {student_id}", grade="9th", enrollmentDate="2024-09-01",
        attendanceRate=attendance, currentGPA=gpa, behaviorScore=behavior,
    )

@pytest.fixture
def student():
    return make_student()

@pytest.fixture
def gemini_reply():
    return json.dumps({
        "riskScore": 0.65,
        "confidence": 0.9,
        "factors": [{"feature": "Attendance", "impact": 0.5, "description": "Missed several days"}],
        "reasoning": "Recent attendance dropped sharply.",
    })

# --- Single Prediction ---

def test_fallback_prediction_follows_the_rule_based_formula(student):
    prediction = PredictionService(api_key=None).fallback_prediction(student)
    assert prediction.riskScore == 0.22
    assert prediction.riskLevel == RiskLevel.LOW
    assert prediction.confidence == FALLBACK_CONFIDENCE
    assert prediction.modelVersion == "1.0.0-fallback"
    assert [f.feature for f in prediction.factors] == ["Attendance Rate", "Academic Performance", "Behavioral Indicators"]
    assert [f.impact for f in prediction.factors] == [-0.1, -0.2, -0.1]

def test_fallback_factors_flag_weak_metrics():
    prediction = PredictionService(api_key=None).fallback_prediction(make_student(attendance=60, gpa=1.5, behavior=1.0))
    assert [f.impact for f in prediction.factors] == [0.3, 0.4, 0.2]

@pytest.mark.asyncio
async def test_predict_uses_gemini_when_a_key_is_configured(mocker, student, gemini_reply):
    mock_generate = mocker.patch('app.services.gemini_service.generate_text', new_callable=AsyncMock, return_value=gemini_reply)
    service = PredictionService(api_key="test-key")

    prediction = await service.predict(student, [], [], [])

    mock_generate.assert_awaited_once()
    assert mock_generate.await_args.kwargs["api_key"] == "test-key"
    assert "Student stu_1" in mock_generate.await_args.args[0]
    assert prediction.modelVersion == "1.0.0-gemini"
    assert prediction.riskScore == 0.65
    assert prediction.riskLevel == RiskLevel.HIGH
    assert prediction.confidence == 0.9
    assert prediction.reasoning == "Recent attendance dropped sharply."
    assert not is_fallback(prediction)

@pytest.mark.asyncio
async def test_predict_without_api_key_skips_the_remote_call(mocker, student):
    mock_generate = mocker.patch('app.services.gemini_service.generate_text', new_callable=AsyncMock)
    prediction = await PredictionService(api_key=None).predict(student, [], [], [])
    mock_generate.assert_not_awaited()
    assert is_fallback(prediction)

@pytest.mark.asyncio
async def test_predict_falls_back_on_server_error(mocker, student):
    """
    GIVEN: The Gemini call fails with an HTTP 500.
    WHEN:  predict is called.
    THEN:  It returns the rule-based prediction instead of raising.
    """
    mocker.patch(
        'app.services.gemini_service.generate_text',
        new_callable=AsyncMock,
        side_effect=google_exceptions.InternalServerError("500 Internal error"),
    )
    prediction = await PredictionService(api_key="test-key").predict(student, [], [], [])
    assert prediction.modelVersion.endswith("-fallback")
    assert prediction.confidence == 0.75
    assert prediction.riskScore == 0.22

@pytest.mark.asyncio
async def test_predict_falls_back_on_unparseable_reply(mocker, student):
    mocker.patch('app.services.gemini_service.generate_text', new_callable=AsyncMock, return_value="No JSON here, sorry.")
    prediction = await PredictionService(api_key="test-key").predict(student, [], [], [])
    assert is_fallback(prediction)

# --- Batch Prediction ---

@pytest.mark.asyncio
async def test_batch_predict_preserves_input_order():
    """Predictions that finish out of order are still returned in roster order."""
    students = [make_student(f"stu_{i}") for i in range(7)]
    service = PredictionService(api_key=None, batch_delay_seconds=0)

    async def slow_then_fast(student, *records):
        index = int(student.id.split("_")[1])
        await asyncio.sleep(0.01 * (5 - index % 5))
        return service.fallback_prediction(student)

    service.predict = slow_then_fast
    predictions = await service.batch_predict(students, [], [], [])
    assert [p.studentId for p in predictions] == [s.id for s in students]

@pytest.mark.asyncio
async def test_batch_predict_limits_calls_in_flight():
    students = [make_student(f"stu_{i}") for i in range(12)]
    service = PredictionService(api_key=None, batch_delay_seconds=0)
    in_flight = 0
    peak = 0

    async def tracked_predict(student, *records):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return service.fallback_prediction(student)

    service.predict = tracked_predict
    predictions = await service.batch_predict(students, [], [], [])
    assert len(predictions) == 12
    assert peak == 5

@pytest.mark.asyncio
async def test_batch_predict_pauses_between_batches(mocker):
    mock_sleep = mocker.patch('app.services.prediction_service.asyncio.sleep', new_callable=AsyncMock)
    students = [make_student(f"stu_{i}") for i in range(7)]

    await PredictionService(api_key=None).batch_predict(students, [], [], [])

    # Two batches, one pause between them, none after the last.
    mock_sleep.assert_awaited_once_with(1.0)

@pytest.mark.asyncio
async def test_batch_predict_substitutes_fallback_for_a_failed_prediction(mocker):
    students = [make_student("stu_a"), make_student("stu_b", attendance=50, gpa=1.0, behavior=5)]
    service = PredictionService(api_key=None, batch_delay_seconds=0)
    remote = service.fallback_prediction(students[0]).model_copy(update={"modelVersion": "1.0.0-gemini"})
    mocker.patch.object(service, "predict", new_callable=AsyncMock, side_effect=[remote, RuntimeError("boom")])

    predictions = await service.batch_predict(students, [], [], [])

    assert predictions[0].modelVersion == "1.0.0-gemini"
    assert predictions[1].studentId == "stu_b"
    assert is_fallback(predictions[1])

@pytest.mark.asyncio
async def test_batch_predict_passes_each_student_only_their_records(mocker):
    from app.models.record_model import AttendanceRecord
    students = [make_student("stu_a"), make_student("stu_b")]
    attendance = [
        AttendanceRecord(id="att_1", studentId="stu_a", date="2025-01-02", status="Present"),
        AttendanceRecord(id="att_2", studentId="stu_b", date="2025-01-02", status="Absent"),
    ]
    service = PredictionService(api_key=None, batch_delay_seconds=0)
    spy = mocker.spy(service, "predict")

    await service.batch_predict(students, attendance, [], [])

    first_call_attendance = spy.call_args_list[0].args[1]
    assert [r.id for r in first_call_attendance] == ["att_1"]
