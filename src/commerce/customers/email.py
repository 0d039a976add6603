"""Email normalisation and structural validation."""

from protean.exceptions import ValidationError

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def normalize_email(email):
    """Return the lower-cased, trimmed address or raise ValidationError."""
    if not email or not isinstance(email, str):
        raise ValidationError({"email": ["Email is required"]})

    address = email.strip().lower()
    error = ValidationError({"email": [f"Invalid email address: {email!r}"]})

    if any(ch in address for ch in (" ", "\t", "\n")):
        raise error
    if address.count("@") != 1:
        raise error

    local_part, domain_part = address.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        raise error
    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        raise error
    if "." not in domain_part:
        raise error
    if ".." in local_part or ".." in domain_part:
        raise error
    # Check each label in the domain for leading/trailing hyphens
    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            raise error
    if any(ch in address for ch in _FORBIDDEN):
        raise error

    return address
