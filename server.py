import json
import os
from functools import wraps

import click
from dotenv import load_dotenv
from flask import (
    Flask,
    Response,
    abort,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from analyzer import analyze_screenshot
from client import AnalysisSubmitter
from errors import (
    AnalysisError,
    ConfigurationError,
    ImageError,
    InvalidInput,
    PayloadTooLarge,
    SubmissionError,
    UnexpectedError,
)
from models import Report, db
from normalizer import normalize_image
from prompt import SEVERITIES

# base64 data URL은 금방 커진다
MAX_IMAGE_DATAURL_CHARS = 2_000_000

load_dotenv()

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 8 * 1024 * 1024  # 8MB
app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

# ── Database ──
database_url = os.getenv("DATABASE_URL", "sqlite:///local.db")
if database_url.startswith("postgres://"):
    database_url = database_url.replace("postgres://", "postgresql://", 1)
app.config["SQLALCHEMY_DATABASE_URI"] = database_url
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

db.init_app(app)
with app.app_context():
    db.create_all()


@app.errorhandler(413)
def request_entity_too_large(e):
    message = "Upload is too large. Keep it under 8MB."
    if request.endpoint == "analyze_form":
        return render_template("index.html", error=message), 413
    return jsonify({"error": message}), 413


@app.template_filter("severity_class")
def severity_class(severity):
    return f"sev-{severity.lower()}" if severity in SEVERITIES else "sev-low"


# ── Admin auth ──
def require_admin(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        admin_pw = os.getenv("ADMIN_PASSWORD")
        if not admin_pw:
            abort(403, "ADMIN_PASSWORD is not configured.")
        auth = request.authorization
        if not auth or auth.password != admin_pw:
            return Response(
                "Admin authentication required.",
                401,
                {"WWW-Authenticate": 'Basic realm="Admin"'},
            )
        return f(*args, **kwargs)

    return decorated


# ── Pipeline ──
def create_report(image_data_url) -> Report:
    """검증 → 모델 호출 → 정리 → 저장. 실패하면 아무것도 저장하지 않는다."""
    api_key = os.getenv("ANTHROPIC_API_KEY", "")
    if not api_key:
        raise ConfigurationError()

    if not isinstance(image_data_url, str) or not image_data_url.startswith("data:image/"):
        raise InvalidInput()

    if len(image_data_url) > MAX_IMAGE_DATAURL_CHARS:
        raise PayloadTooLarge()

    result = analyze_screenshot(image_data_url, api_key)

    report = Report.create(
        image_data_url=image_data_url,
        score=result["score"],
        top_fixes=result["top_fixes"],
        laws=result["laws"],
    )
    app.logger.info(f"리포트 생성: {report.id} (score={report.score})")
    return report


# ── Routes ──
@app.route("/")
def index():
    return render_template("index.html")


@app.route("/api/analyze", methods=["POST"])
def api_analyze():
    payload = request.get_json(silent=True)
    image_data_url = payload.get("imageDataUrl") if isinstance(payload, dict) else None

    try:
        report = create_report(image_data_url)
    except AnalysisError as e:
        app.logger.warning(f"POST /api/analyze 거부 ({e.status_code}): {e.message}")
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        db.session.rollback()
        app.logger.exception("POST /api/analyze failed")
        err = UnexpectedError(str(e))
        return jsonify(err.to_dict()), err.status_code

    return jsonify({"reportId": report.id})


@app.route("/analyze", methods=["POST"])
def analyze_form():
    """HTML 업로드 폼: 서버에서 이미지 정규화 후 같은 파이프라인 실행."""
    file = request.files.get("screenshot")
    if not file or not file.filename:
        return render_template("index.html", error="Please choose a screenshot to upload."), 400

    try:
        report = create_report(normalize_image(file.stream))
    except ImageError as e:
        return render_template("index.html", error=str(e)), 400
    except AnalysisError as e:
        app.logger.warning(f"POST /analyze 거부 ({e.status_code}): {e.message}")
        return render_template("index.html", error=e.message), e.status_code
    except Exception as e:
        db.session.rollback()
        app.logger.exception("POST /analyze failed")
        err = UnexpectedError(str(e))
        return render_template("index.html", error=err.message), err.status_code

    return redirect(url_for("results", report_id=report.id), code=303)


@app.route("/results/<report_id>")
def results(report_id):
    report = db.session.get(Report, report_id)
    if report is None:
        return render_template("not_found.html"), 404
    return render_template("results.html", report=report)


# ── Admin routes ──
@app.route("/admin")
@require_admin
def admin_list():
    page = request.args.get("page", 1, type=int)
    per_page = 20
    pagination = Report.query.order_by(Report.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return render_template("admin.html", pagination=pagination)


def _export(include_image: bool, filename: str):
    reports = Report.query.order_by(Report.created_at.desc()).all()
    data = [r.to_dict(include_image=include_image) for r in reports]
    return Response(
        json.dumps(data, ensure_ascii=False, indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.route("/admin/export")
@require_admin
def admin_export():
    return _export(False, "ux_reports.json")


@app.route("/admin/export-full")
@require_admin
def admin_export_full():
    return _export(True, "ux_reports_full.json")


# ── CLI ──
@app.cli.command("submit")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--base-url", default="http://127.0.0.1:5000", show_default=True)
def submit_command(path, base_url):
    """스크린샷 파일을 정규화해 분석 서버에 제출하고 결과 URL 출력."""
    submitter = AnalysisSubmitter(base_url)
    try:
        report_id = submitter.submit_file(path)
    except (ImageError, SubmissionError) as e:
        raise click.ClickException(str(e))
    click.echo(submitter.report_url(report_id))


if __name__ == "__main__":
    app.run(debug=True, port=5000)
