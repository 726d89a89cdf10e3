import pytest

from resolution.errors import InvalidNamespaceError
from resolution.namespace import Namespace


class TestNamespace:
    def test_prefixes(self):
        ns = Namespace("acme", "prod")

        assert ns.parameter_prefix == "/acme/prod"
        assert ns.secret_prefix == "acme/prod"
        assert ns.application_id == "acme-prod"

    @pytest.mark.parametrize("project,environment", [("", "prod"), ("acme", ""), ("  ", "prod")])
    def test_empty_parts_rejected(self, project, environment):
        with pytest.raises(InvalidNamespaceError):
            Namespace(project, environment)

    def test_invalid_namespace_is_value_error(self):
        with pytest.raises(ValueError):
            Namespace("", "")

    def test_immutable(self):
        ns = Namespace("acme", "prod")
        with pytest.raises(AttributeError):
            ns.project = "other"

    def test_equal_values_hash_equal(self):
        assert Namespace("acme", "prod") == Namespace("acme", "prod")
        assert len({Namespace("acme", "prod"), Namespace("acme", "prod")}) == 1
