"""CLI command tests."""

from click.testing import CliRunner

from crm.cli import cli
from crm.db.models import Pipeline, User


def test_create_pipeline_seeds_default_stages(db):
    result = CliRunner().invoke(cli, ["create-pipeline", "--name", "Vendas"])

    assert result.exit_code == 0, result.output
    assert "Created pipeline: Vendas" in result.output
    pipeline = db.query(Pipeline).filter(Pipeline.name == "Vendas").one()
    assert [s.title for s in pipeline.stages] == ["Prospecção", "Qualificação", "Proposta", "Fechamento"]
    assert all(s.is_default for s in pipeline.stages)


def test_list_stages(db, pipeline):
    result = CliRunner().invoke(cli, ["list-stages", "--pipeline-id", str(pipeline.id)])

    assert result.exit_code == 0, result.output
    assert "[0] Prospecting" in result.output
    assert "[1] Proposal" in result.output


def test_list_stages_unknown_pipeline(db):
    result = CliRunner().invoke(cli, ["list-stages", "--pipeline-id", "404"])
    assert result.exit_code == 1


def test_set_role(db, test_user):
    result = CliRunner().invoke(cli, ["set-role", "--user-id", test_user.id, "--role", "externo"])

    assert result.exit_code == 0, result.output
    db.expire_all()
    assert db.query(User).filter(User.id == test_user.id).one().role == "externo"


def test_set_role_rejects_unknown_role(db, test_user):
    result = CliRunner().invoke(cli, ["set-role", "--user-id", test_user.id, "--role", "owner"])
    assert result.exit_code != 0
