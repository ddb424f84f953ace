import json
import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

NARRATIVE_KEY = "narrative"


def _new_id() -> str:
    return str(uuid.uuid4())


class Report(db.Model):
    __tablename__ = "Report"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    created_at = db.Column(
        "createdAt",
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    image_data_url = db.Column("imageDataUrl", db.Text, nullable=False)
    # 예약 필드 (항상 기본값)
    goal = db.Column(db.Text, nullable=False, default="")
    nav_items = db.Column("navItems", db.Integer, nullable=False, default=0)
    cta_count = db.Column("ctaCount", db.Integer, nullable=False, default=0)
    form_fields = db.Column("formFields", db.Integer, nullable=False, default=0)

    score = db.Column(db.Integer, nullable=False)
    top_fixes_json = db.Column("topFixes", db.Text, nullable=False)  # JSON list
    laws_json = db.Column("laws", db.Text, nullable=False)  # JSON object (+ narrative)

    @classmethod
    def create(cls, image_data_url: str, score: int, top_fixes: list, laws: dict):
        report = cls(
            image_data_url=image_data_url,
            goal="",
            nav_items=0,
            cta_count=0,
            form_fields=0,
            score=score,
            top_fixes_json=json.dumps(top_fixes, ensure_ascii=False),
            laws_json=json.dumps(laws, ensure_ascii=False),
        )
        db.session.add(report)
        db.session.commit()
        return report

    @property
    def top_fixes(self) -> list:
        value = json.loads(self.top_fixes_json) if self.top_fixes_json else []
        return value if isinstance(value, list) else []

    @property
    def laws(self) -> dict:
        value = json.loads(self.laws_json) if self.laws_json else {}
        return value if isinstance(value, dict) else {}

    @property
    def narrative(self) -> str:
        value = self.laws.get(NARRATIVE_KEY)
        return value if isinstance(value, str) else ""

    @property
    def law_findings(self) -> list[tuple[str, dict]]:
        """narrative 키를 제외한 법칙별 결과 (저장 순서 유지)."""
        return [
            (key, item)
            for key, item in self.laws.items()
            if key != NARRATIVE_KEY and isinstance(item, dict)
        ]

    def to_dict(self, include_image: bool = False):
        data = {
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "goal": self.goal,
            "navItems": self.nav_items,
            "ctaCount": self.cta_count,
            "formFields": self.form_fields,
            "score": self.score,
            "topFixes": self.top_fixes,
            "laws": self.laws,
        }
        if include_image:
            data["imageDataUrl"] = self.image_data_url
        return data
