import pytest
from pathlib import Path
from typing import Dict

COMPLIANT_FILES = {
    "README.md": "# Document processor\n\nUses managed identity for every Azure call.\n",
    "requirements.txt": "azure-identity==1.15.0\nazure-storage-blob==12.19.0\n",
    "app/client.py": (
        "import logging\n"
        "from azure.identity import DefaultAzureCredential\n"
        "\n"
        "logger = logging.getLogger(__name__)\n"
        "\n"
        "\n"
        "def get_credential() -> DefaultAzureCredential:\n"
        "    logger.info(\"Using managed identity\")\n"
        "    return DefaultAzureCredential()\n"
    ),
    "app/processor.py": (
        "import logging\n"
        "\n"
        "logger = logging.getLogger(__name__)\n"
        "\n"
        "\n"
        "def process(text: str) -> str:\n"
        "    logger.debug(\"processing\")\n"
        "    return text.upper()\n"
    ),
    "tests/test_app.py": (
        "from app.processor import process\n"
        "\n"
        "def test_process():\n"
        "    assert process('a') == 'A'\n"
    ),
    "infra/main.bicep": (
        "param location string = resourceGroup().location\n"
        "\n"
        "module storage 'modules/storage.bicep' = {\n"
        "  name: 'storage'\n"
        "  params: {\n"
        "    location: location\n"
        "  }\n"
        "}\n"
    ),
    "infra/modules/storage.bicep": (
        "param location string\n"
        "param principalId string\n"
        "\n"
        "resource account 'Microsoft.Storage/storageAccounts@2023-01-01' = {\n"
        "  name: 'st${uniqueString(resourceGroup().id)}'\n"
        "  location: location\n"
        "  kind: 'StorageV2'\n"
        "  sku: {\n"
        "    name: 'Standard_LRS'\n"
        "  }\n"
        "  properties: {\n"
        "    allowSharedKeyAccess: false\n"
        "  }\n"
        "}\n"
        "\n"
        "resource reader 'Microsoft.Authorization/roleAssignments@2022-04-01' = {\n"
        "  name: guid(account.id, principalId)\n"
        "  scope: account\n"
        "  properties: {\n"
        "    roleDefinitionId: subscriptionResourceId('Microsoft.Authorization/roleDefinitions', "
        "'2a2b9908-6ea1-4ae2-8e65-a410df84e7d1')\n"
        "    principalId: principalId\n"
        "  }\n"
        "}\n"
        "\n"
        "resource diagnostics 'Microsoft.Insights/diagnosticSettings@2021-05-01-preview' = {\n"
        "  name: 'diag'\n"
        "  scope: account\n"
        "}\n"
    ),
}

NONCOMPLIANT_FILES = {
    ".env": "OPENAI_API_KEY=abcdefghijklmnop1234\n",
    "app/client.py": (
        "from azure.core.credentials import AzureKeyCredential\n"
        "from azure.identity import DefaultAzureCredential\n"
        "\n"
        "API_KEY = \"sk1234567890abcdefXYZ\"\n"
        "\n"
        "\n"
        "def get_credential(key):\n"
        "    return AzureKeyCredential(key or API_KEY)\n"
    ),
    "app/util.py": (
        "def helper(x):\n"
        "    print(x)\n"
        "    return x\n"
    ),
    "infra/main.bicep": (
        "param location string = resourceGroup().location\n"
        "param openAiApiKey string\n"
        "param principalId string\n"
        "\n"
        "resource owner 'Microsoft.Authorization/roleAssignments@2022-04-01' = {\n"
        "  name: guid(resourceGroup().id, principalId)\n"
        "  properties: {\n"
        "    roleDefinitionId: subscriptionResourceId('Microsoft.Authorization/roleDefinitions', "
        "'8e3af657-a8ff-443c-a75c-2fe8c4bcb635')\n"
        "    principalId: principalId\n"
        "  }\n"
        "}\n"
    ),
}


def write_files(root: Path, files: Dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_repo(tmp_path):
    def _make(files: Dict[str, str], name: str = "repo") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        return write_files(root, files)
    return _make


@pytest.fixture
def compliant_repo(make_repo):
    return make_repo(COMPLIANT_FILES, "compliant")


@pytest.fixture
def noncompliant_repo(make_repo):
    return make_repo(NONCOMPLIANT_FILES, "noncompliant")


def file_rule(rule_id: str, severity: str = "medium", effort: str = "medium",
              patterns=("README*",), mode: str = "require", **extra) -> dict:
    """Minimal rule definition for loader-based tests."""
    rule = {
        "id": rule_id,
        "title": f"Rule {rule_id}",
        "severity": severity,
        "category": "test",
        "effort": effort,
        "remediation": f"Fix {rule_id}",
        "predicate": {"kind": "file_pattern", "patterns": list(patterns), "mode": mode},
    }
    rule.update(extra)
    return rule
