import pytest

from authz_admin.core import validators


class TestRequire:
    def test_returns_trimmed_value(self):
        assert validators.require("  acme ", "Tenant id") == "acme"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_values(self, value):
        with pytest.raises(validators.ValidationError, match="Tenant id is required"):
            validators.require(value, "Tenant id")


class TestValidateEmail:
    def test_preserves_case(self):
        assert validators.validate_email("  Jane.Doe@Example.COM ") == "Jane.Doe@Example.COM"

    @pytest.mark.parametrize(
        "email",
        ["", "no-at-symbol", "user@", "@domain.com", "user@example", "a" * 255 + "@example.com"],
    )
    def test_invalid_email_formats(self, email):
        with pytest.raises(validators.ValidationError):
            validators.validate_email(email)


class TestValidateName:
    def test_valid_name_passes(self):
        assert validators.validate_name(" Alice ", "First name") == "Alice"

    @pytest.mark.parametrize(
        "name, message",
        [
            ("", "First name is required"),
            ("A" * 129, "First name exceeds maximum length"),
            ("Robert'); DROP", "First name contains invalid characters"),
        ],
    )
    def test_invalid_names(self, name, message):
        with pytest.raises(validators.ValidationError, match=message):
            validators.validate_name(name, "First name")


class TestValidateBcryptHash:
    @pytest.mark.parametrize("prefix", ["$2a$", "$2b$", "$2y$"])
    def test_accepts_bcrypt_variants(self, prefix):
        value = prefix + "10$abcdefghijklmnopqrstuv"
        assert validators.validate_bcrypt_hash(value) is value

    def test_rejects_other_hashes(self):
        with pytest.raises(validators.ValidationError, match="must start with"):
            validators.validate_bcrypt_hash("$argon2id$v=19$m=65536")

    def test_rejects_blank(self):
        with pytest.raises(validators.ValidationError, match="bcrypt hash is required"):
            validators.validate_bcrypt_hash("  ")


class TestValidateUrl:
    def test_accepts_https(self):
        assert validators.validate_url(" https://sp.example.com/metadata ", "Metadata URL") == (
            "https://sp.example.com/metadata"
        )

    @pytest.mark.parametrize("value", ["", "ftp://example.com", "example.com/path", "https:// bad"])
    def test_rejects_non_http_urls(self, value):
        with pytest.raises(validators.ValidationError, match="Metadata URL must be an absolute http"):
            validators.validate_url(value, "Metadata URL")


def test_validation_error_is_a_value_error():
    assert issubclass(validators.ValidationError, ValueError)
