import logging
from datetime import datetime
from io import BytesIO

import pandas as pd
from flask import Blueprint, jsonify, send_file

from ..models import SurveyResponse
from ..questions import FIELDS, MULTIPLE

logger = logging.getLogger(__name__)

bp = Blueprint("export", __name__, url_prefix="/api")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_rows(records):
    """One spreadsheet row per response, titled by the questionnaire."""
    rows = []
    for r in records:
        row = {"ID": r["id"], "Data": r["created_at"]}
        for d in FIELDS:
            value = r[d.attr]
            row[d.title] = "; ".join(value) if d.kind == MULTIPLE else value
        rows.append(row)
    return rows


@bp.get("/export")
def export_responses():
    """Export every response to Excel"""
    try:
        responses = SurveyResponse.query.order_by(SurveyResponse.created_at.asc()).all()
        if not responses:
            return jsonify({"error": "Nenhuma resposta para exportar"}), 404

        df = pd.DataFrame(export_rows([r.to_record() for r in responses]))

        output = BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Respostas", index=False)
        output.seek(0)

        filename = f"pesquisa_vinhos_{datetime.now().strftime('%Y%m%d')}.xlsx"
        return send_file(output, mimetype=XLSX_MIMETYPE, as_attachment=True, download_name=filename)

    except Exception as e:
        logger.error(f"Export error: {str(e)}")
        return jsonify({"error": "Falha na exportação"}), 500
