import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from ..extensions import db
from ..models import SurveyResponse
from ..questions import FIELDS, MULTIPLE, TOTAL_STEPS, questionnaire, validate_step
from ..reports.aggregation import field, group_and_count_multi

logger = logging.getLogger(__name__)

bp = Blueprint("survey", __name__, url_prefix="/api")


class PayloadError(ValueError):
    pass


def client_ip():
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or request.remote_addr


def parse_payload(payload):
    """camelCase form body -> model attributes; blanks become None, missing lists []."""
    if not isinstance(payload, dict):
        raise PayloadError("corpo da requisição deve ser um objeto JSON")
    values = {}
    for descriptor in FIELDS:
        raw = payload.get(descriptor.field_id)
        if descriptor.kind == MULTIPLE:
            if raw is None or raw == "":
                raw = []
            elif isinstance(raw, str):
                raw = [raw]
            if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
                raise PayloadError(f"campo '{descriptor.field_id}' deve ser uma lista de textos")
            values[descriptor.attr] = [v for v in raw if v.strip()]
        else:
            if isinstance(raw, bool) or (raw is not None and not isinstance(raw, (str, int, float))):
                raise PayloadError(f"campo '{descriptor.field_id}' deve ser texto")
            text = "" if raw is None else str(raw).strip()
            values[descriptor.attr] = text or None
    return values


@bp.post("/survey")
def submit_survey():
    try:
        values = parse_payload(request.get_json(silent=True))
    except PayloadError as e:
        return jsonify({"error": str(e)}), 400

    try:
        response = SurveyResponse(
            **values,
            user_agent=(request.headers.get("User-Agent") or None),
            ip_address=client_ip(),
            completed_at=datetime.utcnow(),
        )
        db.session.add(response)
        db.session.commit()
        logger.info(f"Survey response saved: {response.id}")
        return jsonify({
            "success": True,
            "message": "Pesquisa enviada com sucesso!",
            "surveyId": response.id,
        }), 200

    except Exception as e:
        db.session.rollback()
        logger.error(f"Error saving survey response: {str(e)}")
        return jsonify({"error": "Erro interno do servidor"}), 500


@bp.get("/survey")
def list_surveys():
    try:
        limit = current_app.config["SURVEY_LIST_LIMIT"]
        rows = (SurveyResponse.query
                .order_by(SurveyResponse.created_at.desc())
                .limit(limit)
                .all())
        total = db.session.query(func.count(SurveyResponse.id)).scalar() or 0
        records = [r.to_record() for r in rows]

        # stats cover the whole table, not just the returned page
        all_types = [{"wine_type": t} for (t,) in db.session.query(SurveyResponse.wine_type)]
        wine_types = group_and_count_multi(all_types, field("wine_type"))
        surveys = []
        for r in records:
            item = {d.field_id: r[d.attr] for d in FIELDS}
            item["id"] = r["id"]
            item["createdAt"] = r["created_at"].isoformat() if r["created_at"] else None
            item["completedAt"] = r["completed_at"].isoformat() if r["completed_at"] else None
            surveys.append(item)

        return jsonify({
            "surveys": surveys,
            "analytics": {
                "total": total,
                "wineTypeStats": [{"type": b.key, "count": b.count} for b in wine_types],
            },
        }), 200

    except Exception as e:
        logger.error(f"Error fetching survey responses: {str(e)}")
        return jsonify({"error": "Erro interno do servidor"}), 500


@bp.get("/questions")
def get_questions():
    return jsonify({"totalSteps": TOTAL_STEPS, "steps": questionnaire()}), 200


@bp.post("/survey/validate")
def validate():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "corpo da requisição deve ser um objeto JSON"}), 400
    step = payload.get("step")
    data = payload.get("data") or {}
    if not isinstance(step, int) or isinstance(step, bool) or not isinstance(data, dict):
        return jsonify({"error": "informe 'step' (inteiro) e 'data' (objeto)"}), 400
    try:
        result = validate_step(step, data)
    except IndexError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"isValid": result.is_valid, "missing": result.missing}), 200
