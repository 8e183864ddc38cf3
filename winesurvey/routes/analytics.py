import logging
from datetime import datetime, timedelta

from flask import Blueprint, jsonify
from sqlalchemy import func

from ..extensions import db
from ..models import SurveyResponse
from ..questions import FIELDS_BY_ID, MULTIPLE
from ..reports.aggregation import buckets_from_counts, field, group_and_count_multi, percent
from ..reports.segments import SEGMENTS, count_segment

logger = logging.getLogger(__name__)

bp = Blueprint("analytics", __name__, url_prefix="/api")


def _total():
    return db.session.query(func.count(SurveyResponse.id)).scalar() or 0


@bp.get("/analytics/distribution/<field_id>")
def distribution(field_id):
    descriptor = FIELDS_BY_ID.get(field_id)
    if descriptor is None:
        return jsonify({"error": f"campo desconhecido: {field_id}"}), 404
    try:
        total = _total()
        if descriptor.kind == MULTIPLE:
            records = [r.to_record() for r in SurveyResponse.query.all()]
            buckets = group_and_count_multi(records, field(descriptor.attr), total=total)
        else:
            column = getattr(SurveyResponse, descriptor.attr)
            rows = db.session.query(column, func.count(SurveyResponse.id)).group_by(column).all()
            buckets = buckets_from_counts(rows, total)
        return jsonify({
            "field": field_id,
            "title": descriptor.title,
            "total": total,
            "buckets": [b.to_dict() for b in buckets],
        }), 200

    except Exception as e:
        logger.error(f"Error fetching distribution for {field_id}: {str(e)}")
        return jsonify({"error": "Erro interno do servidor"}), 500


@bp.get("/analytics/segments")
def segments():
    try:
        records = [r.to_record() for r in SurveyResponse.query.all()]
        total = len(records)
        result = []
        for name, segment in SEGMENTS.items():
            n = count_segment(records, name)
            result.append({"rule": name, "label": segment.label, "count": n, "percentage": percent(n, total)})
        return jsonify({"total": total, "segments": result}), 200

    except Exception as e:
        logger.error(f"Error computing segments: {str(e)}")
        return jsonify({"error": "Erro interno do servidor"}), 500


@bp.get("/stats")
def get_stats():
    """Overall response counters"""
    try:
        def not_null(column):
            return SurveyResponse.query.filter(column.isnot(None)).count()

        stats = {
            "total_responses": _total(),
            "with_email": not_null(SurveyResponse.email),
            "with_phone": not_null(SurveyResponse.phone),
            "with_cep": not_null(SurveyResponse.cep),
            "recent_responses": SurveyResponse.query.filter(
                SurveyResponse.created_at >= datetime.utcnow() - timedelta(days=7)
            ).count(),
        }
        return jsonify(stats), 200

    except Exception as e:
        logger.error(f"Error fetching stats: {str(e)}")
        return jsonify({"error": "Erro interno do servidor"}), 500
