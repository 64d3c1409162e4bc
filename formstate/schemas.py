"""JSON Schemas for the application's data-entry forms.

Each schema is a plain Draft 7 document using two formstate extensions:
``errorMessages`` for user-facing messages and ``fieldsMatch`` for
confirmation fields. Pass one as ``schema=`` to create_form, or wrap it with
formstate.validation.JsonSchema to reuse the compiled validator.
"""

from typing import Any, Dict

from formstate.helpers import EMAIL_RE

NAME_PATTERN = r"^[a-zA-Z\s'-]+$"
PHONE_PATTERN = r"^\+?[\d\s\-\(\)]+$"
SPECIAL_CHARACTERS = r"[!@#$%^&*(),.?\":{}|<>]"


def email_field() -> Dict[str, Any]:
    return {
        "type": "string",
        "minLength": 1,
        "maxLength": 254,
        "format": "email",
        "pattern": EMAIL_RE.pattern,
        "errorMessages": {
            "required": "Email is required",
            "minLength": "Email is required",
            "format": "Please enter a valid email address",
            "pattern": "Please enter a valid email address",
            "maxLength": "Email is too long",
        },
    }


def name_field() -> Dict[str, Any]:
    # Keyword order decides which message is shown first for an empty value.
    return {
        "type": "string",
        "allOf": [{"minLength": 1, "errorMessages": {"minLength": "Name is required"}}],
        "minLength": 2,
        "maxLength": 100,
        "pattern": NAME_PATTERN,
        "errorMessages": {
            "required": "Name is required",
            "minLength": "Name must be at least 2 characters",
            "maxLength": "Name is too long",
            "pattern": "Name can only contain letters, spaces, hyphens, and apostrophes",
        },
    }


def password_field() -> Dict[str, Any]:
    # Each character-class rule is its own allOf branch so every unmet rule is reported.
    return {
        "type": "string",
        "minLength": 8,
        "errorMessages": {
            "required": "Password is required",
            "minLength": "Password must be at least 8 characters",
        },
        "allOf": [
            {"pattern": "[A-Z]", "errorMessages": {"pattern": "Password must contain at least one uppercase letter"}},
            {"pattern": "[a-z]", "errorMessages": {"pattern": "Password must contain at least one lowercase letter"}},
            {"pattern": r"\d", "errorMessages": {"pattern": "Password must contain at least one number"}},
            {
                "pattern": SPECIAL_CHARACTERS,
                "errorMessages": {"pattern": "Password must contain at least one special character"},
            },
        ],
    }


def phone_field() -> Dict[str, Any]:
    return {
        "type": "string",
        "anyOf": [{"maxLength": 0}, {"pattern": PHONE_PATTERN}],
        "errorMessages": {"anyOf": "Please enter a valid phone number"},
    }


def required_string(label: str, min_length: int = 1) -> Dict[str, Any]:
    return {
        "type": "string",
        "minLength": min_length,
        "errorMessages": {
            "required": f"{label} is required",
            "minLength": f"{label} is required" if min_length <= 1 else f"{label} must be at least {min_length} characters",
        },
    }


def limited_string(label: str, max_length: int) -> Dict[str, Any]:
    return {
        "type": "string",
        "maxLength": max_length,
        "errorMessages": {"maxLength": f"{label} must be less than {max_length} characters"},
    }


PRIORITIES = ["low", "normal", "high", "urgent"]

CONTACT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": name_field(),
        "email": email_field(),
        "subject": required_string("Subject", 3),
        "message": required_string("Message", 10),
        "category": {"enum": ["general", "technical", "billing", "coaching", "other"]},
        "priority": {"enum": PRIORITIES},
    },
    "required": ["name", "email", "subject", "message"],
}

SUPPORT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": name_field(),
        "email": email_field(),
        "subject": required_string("Subject", 3),
        "category": {
            "enum": ["account", "billing", "technical", "feature", "other"],
            "errorMessages": {"required": "Please select a category", "enum": "Please select a category"},
        },
        "priority": {"enum": PRIORITIES},
        "description": required_string("Description", 20),
    },
    "required": ["name", "email", "subject", "category", "description"],
}

SIGN_IN_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "email": email_field(),
        "password": required_string("Password"),
    },
    "required": ["email", "password"],
}

SIGN_UP_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "email": email_field(),
        "password": password_field(),
        "confirmPassword": {
            "type": "string",
            "minLength": 1,
            "errorMessages": {
                "required": "Please confirm your password",
                "minLength": "Please confirm your password",
            },
        },
        "fullName": name_field(),
        "phone": phone_field(),
        "role": {
            "enum": ["client", "coach"],
            "errorMessages": {"required": "Please select your role", "enum": "Please select your role"},
        },
        "agreeToTerms": {
            "const": True,
            "errorMessages": {
                "required": "You must agree to the terms of service",
                "const": "You must agree to the terms of service",
            },
        },
        "marketingConsent": {"type": "boolean"},
    },
    "required": ["email", "password", "confirmPassword", "fullName", "role", "agreeToTerms"],
    "fieldsMatch": [
        {"field": "confirmPassword", "equals": "password", "message": "Passwords do not match"},
    ],
}

CHANGE_PASSWORD_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "currentPassword": required_string("Current password"),
        "newPassword": password_field(),
        "confirmNewPassword": {
            "type": "string",
            "minLength": 1,
            "errorMessages": {
                "required": "Please confirm your new password",
                "minLength": "Please confirm your new password",
            },
        },
    },
    "required": ["currentPassword", "newPassword", "confirmNewPassword"],
    "fieldsMatch": [
        {"field": "confirmNewPassword", "equals": "newPassword", "message": "Passwords do not match"},
    ],
}

PROFILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "firstName": name_field(),
        "lastName": name_field(),
        "email": email_field(),
        "phone": phone_field(),
        "bio": limited_string("Bio", 1000),
        "location": {
            "type": "string",
            "maxLength": 100,
            "errorMessages": {"maxLength": "Location is too long"},
        },
        "timezone": {"type": "string"},
        "language": {"type": "string"},
        "visibility": {"enum": ["public", "private", "coaches"]},
    },
    "required": ["firstName", "lastName", "email", "timezone", "language"],
}

BOOKING_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "coachId": required_string("Coach selection"),
        "sessionType": {"enum": ["initial", "follow-up", "group", "workshop"]},
        "date": required_string("Date"),
        "time": required_string("Time"),
        "duration": {"type": "number", "minimum": 15, "maximum": 180},
        "notes": limited_string("Notes", 500),
        "goals": limited_string("Goals", 1000),
        "timezone": {"type": "string"},
    },
    "required": ["coachId", "sessionType", "date", "time", "duration", "timezone"],
}

COACH_SEARCH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string"},
        "specializations": {"type": "array", "items": {"type": "string"}},
        "languages": {"type": "array", "items": {"type": "string"}},
        "location": {"type": "string"},
        "priceRange": {
            "type": "object",
            "properties": {
                "min": {"type": ["number", "null"], "minimum": 0},
                "max": {"type": ["number", "null"], "minimum": 0},
            },
        },
        "availability": {"enum": ["any", "today", "this-week", "this-month"]},
        "rating": {"type": ["number", "null"], "minimum": 1, "maximum": 5},
        "experience": {"enum": ["any", "1-3", "3-5", "5-10", "10+"]},
    },
}


__all__ = [
    "CONTACT_SCHEMA",
    "SUPPORT_SCHEMA",
    "SIGN_IN_SCHEMA",
    "SIGN_UP_SCHEMA",
    "CHANGE_PASSWORD_SCHEMA",
    "PROFILE_SCHEMA",
    "BOOKING_SCHEMA",
    "COACH_SEARCH_SCHEMA",
]
