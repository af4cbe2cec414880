"""Dashboard web application for the clinic record collections.

This module exposes a small Flask application over one ``ClinicSession``:
JSON endpoints to list, create, edit and delete records of each collection,
plus an HTML overview page. The session is created by ``create_app`` and
lives as long as the application; nothing is persisted.
"""
from __future__ import annotations

from datetime import date, datetime
import logging
import os
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from flask import Blueprint, Flask, Response, current_app, jsonify, render_template_string, request

from connector import SeedClient, seed_session
from records import (
    COLLECTIONS,
    ClinicSession,
    ConflictError,
    DuplicateRecordError,
    FormError,
    NotFoundError,
    UnknownCollectionError,
)

DATE_FORMAT = "%Y-%m-%d"
SESSION_KEY = "clinic_session"
DEFAULT_PORT = int(os.environ.get("PORT", "5000"))

logger = logging.getLogger(__name__)

records_bp = Blueprint("records", __name__)


def parse_iso_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def get_session() -> ClinicSession:
    return current_app.extensions[SESSION_KEY]


def _error(message: str, status: int) -> Tuple[Response, int]:
    return jsonify({"error": message}), status


def _submitted_payload() -> Mapping[str, Any]:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


@records_bp.errorhandler(FormError)
def handle_form_error(exc: FormError):
    return _error(str(exc), 400)


@records_bp.errorhandler(NotFoundError)
def handle_not_found(exc: NotFoundError):
    return _error(str(exc), 404)


@records_bp.errorhandler(ConflictError)
def handle_conflict(exc: ConflictError):
    return _error(str(exc), 409)


@records_bp.errorhandler(DuplicateRecordError)
def handle_duplicate(exc: DuplicateRecordError):
    return _error(str(exc), 409)


@records_bp.errorhandler(UnknownCollectionError)
def handle_unknown_collection(exc: UnknownCollectionError):
    return _error(str(exc), 404)


@records_bp.route("/health", methods=["GET"])
def health() -> Response:
    return jsonify({"status": "ok"})


@records_bp.route("/appointments/slots", methods=["GET"])
def appointment_slots():
    """Return the free booking slots of a provider on one day."""
    provider = (request.args.get("provider") or "").strip()
    day = parse_iso_date(request.args.get("date"))
    if not provider or day is None:
        return _error("provider and date (YYYY-MM-DD) are required", 400)
    slots = get_session().appointments.open_slots(provider, day)
    return jsonify(
        {
            "provider": provider,
            "date": day.strftime(DATE_FORMAT),
            "slots": [slot.strftime("%H:%M") for slot in slots],
        }
    )


@records_bp.route("/billing/summary", methods=["GET"])
def billing_summary() -> Response:
    billing = get_session().billing
    return jsonify({"records": len(billing), "totalBalance": f"{billing.total_balance():.2f}"})


@records_bp.route("/<collection>", methods=["GET"])
def list_records(collection: str):
    session = get_session()
    if collection == "appointments":
        raw_date = request.args.get("date")
        target_date = parse_iso_date(raw_date)
        if raw_date and target_date is None:
            return _error("date must be formatted as YYYY-MM-DD", 400)
        records: Sequence[Any] = session.appointments.list(target_date)
    else:
        records = session.store(collection).list()
    return jsonify([record.to_dict() for record in records])


@records_bp.route("/<collection>", methods=["POST"])
def create_record(collection: str):
    session = get_session()
    data = session.parse(collection, _submitted_payload())
    record = session.store(collection).create(data)
    logger.info("Created %s record %s", collection, record.id)
    return jsonify(record.to_dict()), 201


@records_bp.route("/<collection>/<int:record_id>", methods=["GET"])
def get_record(collection: str, record_id: int):
    return jsonify(get_session().store(collection).get(record_id).to_dict())


@records_bp.route("/<collection>/<int:record_id>", methods=["PUT"])
def update_record(collection: str, record_id: int):
    session = get_session()
    data = session.parse(collection, _submitted_payload())
    record = session.store(collection).update(record_id, data)
    logger.info("Updated %s record %s", collection, record_id)
    return jsonify(record.to_dict())


@records_bp.route("/<collection>/<int:record_id>", methods=["DELETE"])
def delete_record(collection: str, record_id: int):
    get_session().store(collection).delete(record_id)
    return "", 204


def build_dashboard_context(session: ClinicSession, target_date: date | None) -> Dict[str, object]:
    appointments = session.appointments.list(target_date)
    return {
        "filters": {"date": target_date.strftime(DATE_FORMAT) if target_date else ""},
        "appointments": [record.to_dict() for record in appointments],
        "billing": [record.to_dict() for record in session.billing.list()],
        "total_balance": f"{session.billing.total_balance():.2f}",
        "encounters": [record.to_dict() for record in session.encounters.list()],
        "patients": [record.to_dict() for record in session.patients.list()],
    }


dashboard_template = """
<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\">
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">
    <title>Clinic Records</title>
    <link
      href=\"https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css\"
      rel=\"stylesheet\"
      integrity=\"sha384-QWTKZyjpPEjISv5WaRU9OFeRpok6YctnYmDr5pNlyT2bRjXh0JMhjY6hW+ALEwIH\"
      crossorigin=\"anonymous\"
    >
  </head>
  <body class=\"bg-light\">
    <nav class=\"navbar navbar-expand-lg navbar-dark bg-success\">
      <div class=\"container-fluid\">
        <a class=\"navbar-brand\" href=\"#\">Clinic Records</a>
      </div>
    </nav>
    <main class=\"container my-4\">
      <section class=\"mb-4\">
        <form class=\"row gy-2 gx-3 align-items-center\" method=\"get\" action=\"/dashboard\" aria-label=\"Appointment filters\">
          <div class=\"col-md-3\">
            <label for=\"filter-date\" class=\"form-label\">Date</label>
            <input id=\"filter-date\" name=\"date\" type=\"date\" class=\"form-control\" value=\"{{ filters.date }}\">
          </div>
          <div class=\"col-md-3 align-self-end\">
            <button type=\"submit\" class=\"btn btn-success w-100\">Filter</button>
          </div>
          <div class=\"col-md-3 align-self-end\">
            <a href=\"/dashboard\" class=\"btn btn-secondary w-100\">Clear</a>
          </div>
        </form>
      </section>
      <section class=\"card shadow-sm mb-4\">
        <div class=\"card-header bg-success text-white\">Appointments</div>
        <div class=\"card-body\">
          {% if appointments %}
            <table class=\"table table-sm table-striped\">
              <thead>
                <tr><th scope=\"col\">Date / Time</th><th scope=\"col\">Patient</th><th scope=\"col\">Provider</th><th scope=\"col\">Reason</th></tr>
              </thead>
              <tbody>
                {% for appointment in appointments %}
                  <tr>
                    <td>{{ appointment.date }} {{ appointment.time }}</td>
                    <td>{{ appointment.patient }}</td>
                    <td>{{ appointment.provider }}</td>
                    <td>{{ appointment.reason or '—' }}</td>
                  </tr>
                {% endfor %}
              </tbody>
            </table>
          {% else %}
            <p class=\"text-muted mb-0\">No appointments found for the selected filters.</p>
          {% endif %}
        </div>
      </section>
      <section class=\"row g-4\">
        <div class=\"col-lg-4\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-warning text-dark\">Billing (total due ${{ total_balance }})</div>
            <div class=\"card-body\">
              {% if billing %}
                <table class=\"table table-sm table-striped\">
                  <thead><tr><th scope=\"col\">Patient</th><th scope=\"col\">Insurance</th><th scope=\"col\">Balance</th></tr></thead>
                  <tbody>
                    {% for record in billing %}
                      <tr><td>{{ record.patient }}</td><td>{{ record.insuranceStatus or '—' }}</td><td>{{ record.balance }}</td></tr>
                    {% endfor %}
                  </tbody>
                </table>
              {% else %}
                <p class=\"text-muted mb-0\">No billing records.</p>
              {% endif %}
            </div>
          </div>
        </div>
        <div class=\"col-lg-4\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-info text-white\">Encounters</div>
            <div class=\"card-body\">
              {% if encounters %}
                <table class=\"table table-sm table-striped\">
                  <thead><tr><th scope=\"col\">Date</th><th scope=\"col\">Diagnoses</th><th scope=\"col\">Vitals</th></tr></thead>
                  <tbody>
                    {% for encounter in encounters %}
                      <tr>
                        <td>{{ encounter.date }}</td>
                        <td>{{ encounter.diagnoses or '—' }}</td>
                        <td>{{ encounter.vitals.temperature or '—' }} / {{ encounter.vitals.bloodPressure or '—' }} / {{ encounter.vitals.heartRate or '—' }}</td>
                      </tr>
                    {% endfor %}
                  </tbody>
                </table>
              {% else %}
                <p class=\"text-muted mb-0\">No encounters recorded.</p>
              {% endif %}
            </div>
          </div>
        </div>
        <div class=\"col-lg-4\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-primary text-white\">Patients</div>
            <div class=\"card-body\">
              {% if patients %}
                <table class=\"table table-sm table-striped\">
                  <thead><tr><th scope=\"col\">Name</th><th scope=\"col\">Age</th><th scope=\"col\">Condition</th></tr></thead>
                  <tbody>
                    {% for patient in patients %}
                      <tr><td>{{ patient.name }}</td><td>{{ patient.age }}</td><td>{{ patient.condition }}</td></tr>
                    {% endfor %}
                  </tbody>
                </table>
              {% else %}
                <p class=\"text-muted mb-0\">No patients registered.</p>
              {% endif %}
            </div>
          </div>
        </div>
      </section>
    </main>
  </body>
</html>
"""


@records_bp.route("/dashboard", methods=["GET"])
def dashboard() -> str:
    target_date = parse_iso_date(request.args.get("date"))
    context = build_dashboard_context(get_session(), target_date)
    return render_template_string(dashboard_template, **context)


def create_app(
    session: Optional[ClinicSession] = None,
    *,
    seed_client: Optional[SeedClient] = None,
    collections: Sequence[str] = COLLECTIONS,
) -> Flask:
    """Build the dashboard around ``session``, seeding it first when a client is given."""

    session = session or ClinicSession()
    if seed_client is not None:
        summary = seed_session(session, seed_client, collections)
        logger.info("Seed step finished: %s", summary)

    app = Flask(__name__)
    app.extensions[SESSION_KEY] = session
    app.register_blueprint(records_bp)
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=DEFAULT_PORT, debug=False)
