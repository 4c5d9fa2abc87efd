"""Coupang (Rocket Now) campaign payloads."""

from typing import Any

from ridejob.api.schemas import CoupangSubmission
from ridejob.services.attribution import COUPANG_MEDIA_NAME, get_coupang_source_display
from ridejob.services.notifications import MISSING, SEPARATOR, RequestMetadata

NOT_SELECTED = "未選択"
FORM_ORIGIN = "coupang_rocketnow"

JOB_POSITION_LABELS: dict[str, str] = {
    "field_sales_tokyo": "フィールドセールス（東京都）",
    "field_sales_osaka": "フィールドセールス（大阪府）",
    "account_manager_tokyo": "アカウントマネージャー（東京都）",
    "account_manager_osaka": "アカウントマネージャー（大阪府）",
}

APPLICATION_REASON_LABELS: dict[str, str] = {
    "company_attraction": "ロケットナウに魅力を感じたため",
    "industry_interest": "フードデリバリー業界に興味があるため",
    "position_interest": "募集職種に興味があるため",
    "compensation_benefits": "給与や待遇に魅力を感じたため",
}

PAST_EXPERIENCE_LABELS: dict[str, str] = {
    "seminar_attended": "はい、セミナーに参加したことがあります",
    "work_experience": "はい、ロケットナウで勤務したことがあります",
    "none": "いいえ、どちらもありません",
}


def label_for(labels: dict[str, str], code: str) -> str:
    """Label for a code; unknown codes pass through, empty ones read 未選択."""
    if not code:
        return NOT_SELECTED
    return labels.get(code, code)


def conditions_met(submission: CoupangSubmission) -> bool:
    return all(
        (
            submission.condition1,
            submission.condition2,
            submission.condition3,
            submission.condition4,
            submission.condition5,
        )
    )


def build_coupang_message(submission: CoupangSubmission) -> str:
    s = submission
    lines = [
        "ロケットナウの応募がありました！",
        SEPARATOR,
        f"流入元: {get_coupang_source_display(s.utm_params)}",
        f"メールアドレス: {s.email or MISSING}",
        f"氏名（漢字）: {s.full_name or MISSING}",
        f"氏名（ふりがな）: {s.full_name_kana or MISSING}",
        f"英名: {s.english_name or MISSING}",
        f"電話番号: {s.phone_number or MISSING}",
        f"希望職種: {label_for(JOB_POSITION_LABELS, s.job_position)}",
        f"志望理由: {label_for(APPLICATION_REASON_LABELS, s.application_reason)}",
        f"参加希望日時: {s.seminar_slot or NOT_SELECTED}",
        f"過去の参加／勤務経験: {label_for(PAST_EXPERIENCE_LABELS, s.past_experience)}",
        f"参加条件: {'すべて満たす' if conditions_met(s) else '一部未確認'}",
        SEPARATOR,
    ]
    return "\n".join(lines)


def build_coupang_record(submission: CoupangSubmission, metadata: RequestMetadata) -> dict[str, Any]:
    s = submission
    utm = s.utm_params
    return {
        "media_name": COUPANG_MEDIA_NAME,
        "utm_source": utm.utm_source if utm else "",
        "utm_medium": utm.utm_medium if utm else "",
        "utm_campaign": utm.utm_campaign if utm else "",
        "utm_term": utm.utm_term if utm else "",
        "email": s.email,
        "full_name": s.full_name,
        "full_name_kana": s.full_name_kana,
        "english_name": s.english_name,
        "phone_number": s.phone_number,
        "job_position": label_for(JOB_POSITION_LABELS, s.job_position),
        "application_reason": label_for(APPLICATION_REASON_LABELS, s.application_reason),
        "seminar_slot": s.seminar_slot,
        "past_experience": label_for(PAST_EXPERIENCE_LABELS, s.past_experience),
        "conditions_met": conditions_met(s),
        "submitted_at": metadata.submitted_at,
        "environment": metadata.environment,
        "user_agent": metadata.user_agent,
        "client_ip": metadata.client_ip,
        "form_origin": FORM_ORIGIN,
    }
