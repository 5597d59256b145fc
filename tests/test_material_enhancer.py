from types import SimpleNamespace

from app.services import material_enhancer
from app.services.material_enhancer import build_prompt, parse_model_json


def test_parse_model_json_handles_code_fences():
    text = '```json\n{"description": "A blade", "attributes": {"age": "300"}}\n```'
    assert parse_model_json(text) == {"description": "A blade", "attributes": {"age": "300"}}


def test_parse_model_json_rejects_garbage():
    assert parse_model_json("no json here") is None
    assert parse_model_json("[1, 2]") is None
    assert parse_model_json("") is None


def test_build_prompt_includes_existing_material():
    prompt = build_prompt({"materialName": "Sword", "currentAttributes": {"edge": "chipped"}})
    assert "Name: Sword" in prompt
    assert "Type: custom" in prompt
    assert '"edge": "chipped"' in prompt


class FakeClient:
    def __init__(self, text):
        self.responses = SimpleNamespace(create=lambda **kwargs: SimpleNamespace(output_text=text))


def test_enhance_material(monkeypatch):
    monkeypatch.setattr(material_enhancer, "_client", FakeClient('{"description": "Forged at dawn."}'))

    out = material_enhancer.enhance_material(
        {"materialName": "Sword", "currentAttributes": {"edge": "chipped"}}, "user-1"
    )

    assert out == {"description": "Forged at dawn.", "attributes": {"edge": "chipped"}, "enhanced": True}


def test_enhance_material_keeps_raw_output_when_unparseable(monkeypatch):
    monkeypatch.setattr(material_enhancer, "_client", FakeClient("Sorry, I can't."))

    out = material_enhancer.enhance_material({"materialName": "Sword", "currentDescription": "Old."}, "user-1")

    assert out["description"] == "Old."
    assert out["rawContent"] == "Sorry, I can't."
    assert "error" in out
