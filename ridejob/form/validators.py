"""Field and step validators for the application form."""

import re
from datetime import date

from ridejob.form.models import (
    AddressMode,
    BirthDate,
    DesiredIncome,
    FormData,
    JobTiming,
    MechanicQualification,
    ValidationResult,
)

MIN_AGE = 18
MAX_AGE = 84

BIRTH_DATE_REQUIRED = "生年月日を選択してください。"
BIRTH_DATE_INVALID = "有効な日付を入力してください。"
BIRTH_DATE_FUTURE = "未来の日付は入力できません。"
BIRTH_DATE_TOO_YOUNG = f"{MIN_AGE}歳以上である必要があります。"
BIRTH_DATE_TOO_OLD = f"{MAX_AGE}歳以下である必要があります。"

LAST_NAME_REQUIRED = "姓は必須です。"
FIRST_NAME_REQUIRED = "名は必須です。"
KANA_INVALID = "ひらがなで入力してください。"
POSTAL_CODE_REQUIRED = "郵便番号を入力してください。"
POSTAL_CODE_INVALID = "郵便番号は7桁の数字で入力してください。"
PREFECTURE_REQUIRED = "都道府県を選択してください。"
MUNICIPALITY_REQUIRED = "市区町村を選択してください。"
PHONE_NUMBER_INVALID = "有効な携帯番号を入力してください。"
EMAIL_REQUIRED = "メールアドレスを入力してください。"
EMAIL_INVALID = "有効なメールアドレスを入力してください。"
SELECTION_REQUIRED = "選択してください。"

_HIRAGANA_RE = re.compile(r"^[ぁ-んー]+$")
_POSTAL_SEPARATORS_RE = re.compile(r"[-－ー\s]")
_MOBILE_RE = re.compile(r"(070|080|090)[0-9]{8}")
_SAME_DIGIT_RUN_RE = re.compile(r"([0-9])\1{4,}")
_SEQUENTIAL_RUN_RE = re.compile(r"01234|12345|23456|34567|45678|56789|98765|87654|76543|65432|54321")
_REPEATED_CYCLE_RE = re.compile(r"([0-9]{1,2})\1+")
_EXAMPLE_NUMBERS = frozenset({"09012345678", "08012345678"})
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def calculate_age(birth: date, today: date) -> int:
    """Age in whole years, adjusted by month/day rather than elapsed days."""
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def _to_date(birth_date: BirthDate) -> date | None:
    """Build a real calendar date, or None when the parts don't round-trip."""
    try:
        year, month, day = int(birth_date.year), int(birth_date.month), int(birth_date.day)
        return date(year, month, day)
    except ValueError:
        return None


def validate_birth_date(birth_date: BirthDate, today: date | None = None) -> ValidationResult:
    """Validate step 1. Only the first failing check produces a message."""
    today = today or date.today()

    if not birth_date.is_complete:
        return ValidationResult(False, {"birth_date": BIRTH_DATE_REQUIRED})

    birth = _to_date(birth_date)
    if birth is None:
        return ValidationResult(False, {"birth_date": BIRTH_DATE_INVALID})

    if birth > today:
        return ValidationResult(False, {"birth_date": BIRTH_DATE_FUTURE})

    age = calculate_age(birth, today)
    if age < MIN_AGE:
        return ValidationResult(False, {"birth_date": BIRTH_DATE_TOO_YOUNG})
    if age > MAX_AGE:
        return ValidationResult(False, {"birth_date": BIRTH_DATE_TOO_OLD})

    return ValidationResult(True, {})


def is_hiragana(text: str) -> bool:
    """True for non-empty hiragana (plus the long-vowel mark). Katakana and romaji fail."""
    return bool(text) and _HIRAGANA_RE.match(text) is not None


def strip_postal_separators(postal_code: str) -> str:
    return _POSTAL_SEPARATORS_RE.sub("", postal_code)


def normalize_postal_code(postal_code: str) -> str:
    """Strip hyphens (ASCII and fullwidth) and whitespace, then left-pad to 7 digits."""
    return strip_postal_separators(postal_code).zfill(7)


def is_valid_postal_code(postal_code: str) -> bool:
    stripped = strip_postal_separators(postal_code)
    return len(stripped) == 7 and stripped.isascii() and stripped.isdigit()


def is_valid_phone_number(phone_number: str) -> bool:
    """Mobile-number shape check plus a blocklist of placeholder/junk input."""
    if not _MOBILE_RE.fullmatch(phone_number):
        return False
    if _SAME_DIGIT_RUN_RE.search(phone_number):
        return False
    if _SEQUENTIAL_RUN_RE.search(phone_number):
        return False
    if _REPEATED_CYCLE_RE.fullmatch(phone_number):
        return False
    if phone_number in _EXAMPLE_NUMBERS:
        return False
    return True


def is_valid_email(email: str) -> bool:
    if not email:
        return False
    return _EMAIL_RE.match(email.strip()) is not None


def validate_name_fields(form_data: FormData) -> ValidationResult:
    errors: dict[str, str] = {}

    if not form_data.last_name.strip():
        errors["last_name"] = LAST_NAME_REQUIRED
    if not form_data.first_name.strip():
        errors["first_name"] = FIRST_NAME_REQUIRED
    if not is_hiragana(form_data.last_name_kana):
        errors["last_name_kana"] = KANA_INVALID
    if not is_hiragana(form_data.first_name_kana):
        errors["first_name_kana"] = KANA_INVALID

    return ValidationResult(not errors, errors)


def validate_address(form_data: FormData, address_mode: AddressMode) -> ValidationResult:
    errors: dict[str, str] = {}

    if address_mode == AddressMode.LOCATION:
        if not form_data.prefecture_id:
            errors["prefecture_id"] = PREFECTURE_REQUIRED
        if not form_data.municipality_id:
            errors["municipality_id"] = MUNICIPALITY_REQUIRED
    elif not form_data.postal_code:
        errors["postal_code"] = POSTAL_CODE_REQUIRED
    elif not is_valid_postal_code(form_data.postal_code):
        errors["postal_code"] = POSTAL_CODE_INVALID

    return ValidationResult(not errors, errors)


def validate_name_address(
    form_data: FormData, address_mode: AddressMode = AddressMode.POSTAL_CODE
) -> ValidationResult:
    """Validate step 2 (names, kana and address)."""
    names = validate_name_fields(form_data)
    address = validate_address(form_data, address_mode)
    errors = {**names.errors, **address.errors}
    return ValidationResult(not errors, errors)


def validate_phone_step(form_data: FormData) -> ValidationResult:
    """Validate step 3. Also used as the re-check right before submission."""
    phone_number = form_data.phone_number.strip()
    if not phone_number or not is_valid_phone_number(phone_number):
        return ValidationResult(False, {"phone_number": PHONE_NUMBER_INVALID})
    return ValidationResult(True, {})


def validate_email_field(email: str) -> str | None:
    """Message for a required email field, or None when it is usable."""
    trimmed = email.strip()
    if not trimmed:
        return EMAIL_REQUIRED
    if not is_valid_email(trimmed):
        return EMAIL_INVALID
    return None


def validate_contact_step(form_data: FormData, require_email: bool) -> ValidationResult:
    """Validate the phone card, including the email field on campaigns that collect it."""
    errors = dict(validate_phone_step(form_data).errors)
    if require_email:
        email_error = validate_email_field(form_data.email)
        if email_error:
            errors["email"] = email_error
    return ValidationResult(not errors, errors)


def validate_job_timing(job_timing: JobTiming | None) -> ValidationResult:
    if not job_timing:
        return ValidationResult(False, {"job_timing": SELECTION_REQUIRED})
    return ValidationResult(True, {})


def validate_mechanic_qualification(qualifications: list[MechanicQualification]) -> ValidationResult:
    """At least one certification ("無資格" counts) must be selected."""
    if not qualifications:
        return ValidationResult(False, {"mechanic_qualifications": SELECTION_REQUIRED})
    return ValidationResult(True, {})


def validate_desired_income(desired_income: DesiredIncome | None) -> ValidationResult:
    if not desired_income:
        return ValidationResult(False, {"desired_income": SELECTION_REQUIRED})
    return ValidationResult(True, {})
