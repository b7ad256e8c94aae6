# (c) Copyright Datacraft, 2026
"""CSV / JSON rendering for the list export endpoints."""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from fastapi.responses import JSONResponse, StreamingResponse

from caseledger.core.utils.tz import utc_now


class ExportFormat(str, Enum):
	CSV = "csv"
	JSON = "json"


def export_value(value):
	"""Flatten a column value into something csv and json both accept."""
	if value is None:
		return ""
	if isinstance(value, Decimal):
		return f"{value:.2f}"
	if isinstance(value, (datetime, date)):
		return value.isoformat()
	if isinstance(value, bool):
		return "Yes" if value else "No"
	return value


def rows_to_csv(columns: list[str], rows: list[dict]) -> str:
	output = io.StringIO()
	writer = csv.writer(output)
	writer.writerow(columns)
	for row in rows:
		writer.writerow([row[column] for column in columns])
	return output.getvalue()


def export_response(
	columns: list[str],
	rows: list[dict],
	fmt: ExportFormat,
	basename: str,
):
	if fmt is ExportFormat.JSON:
		return JSONResponse(content=rows)

	buffer = io.BytesIO(rows_to_csv(columns, rows).encode("utf-8"))
	filename = f"{basename}_{utc_now().date().isoformat()}.csv"
	return StreamingResponse(
		buffer,
		media_type="text/csv; charset=utf-8",
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)
