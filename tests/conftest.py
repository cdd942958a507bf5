import pytest

from nl2cosmos.common.errors import StoreError
from nl2cosmos.schema import build_schema_descriptor

from fakes import FakeOracle


FAMILY_FIELDS = {
    "id": "Id - Unique identifier for the family member record",
    "TwinID": "TwinID - Associated twin identifier (partition key)",
    "parentesco": "Parentesco - Relationship type (padre, madre, hermano, etc.)",
    "nombre": "Nombre - First name of the family member",
    "apellido": "Apellido - Last name of the family member",
    "genero": "Genero - Gender",
    "pais_nacimiento": "PaisNacimiento - Country of birth",
}


@pytest.fixture
def settings_factory():
    """Builds Settings isolated from .env files and provider credentials in the environment."""
    from nl2cosmos.common.settings import Settings

    def _make(**overrides):
        values = {
            "OPENAI_API_KEY": None,
            "AZURE_OPENAI_ENDPOINT": None,
            "AZURE_OPENAI_API_KEY": None,
            "AZURE_OPENAI_CHAT_DEPLOYMENT_NAME": None,
            "COSMOS_ENDPOINT": None,
            "COSMOS_KEY": None,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def family_schema():
    return build_schema_descriptor("FamilyData", FAMILY_FIELDS)


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture
def store_error():
    return StoreError("Request rate is large", status_code=429, request_charge=0.5)
