from __future__ import annotations

import pytest

from systemyml.core.unit_renderer import UnitRenderer
from systemyml.exceptions import InvalidFieldValue
from systemyml.models.service import ServiceDescriptor


def render(body: dict, name: str = "web"):
    return UnitRenderer().render(ServiceDescriptor.from_dict(name, body))


def section_lines(text: str, header: str) -> list[str]:
    lines = []
    inside = False
    for line in text.splitlines():
        if line.startswith("["):
            inside = line == f"[{header}]"
            continue
        if inside and line:
            lines.append(line)
    return lines


def test_minimal_service() -> None:
    unit = render({"service": {"ExecStart": "/usr/bin/web", "User": "www"}})
    assert unit.filename == "web.service"
    assert unit.name == "web"
    assert unit.text == "[Service]\nExecStart=/usr/bin/web\nUser=www\n"


def test_full_layout() -> None:
    unit = render({
        "install": {"WantedBy": "multi-user.target"},
        "environment": {"PORT": 8080, "MODE": "production"},
        "service": {"User": "www", "ExecStart": "/usr/bin/web", "Restart": "on-failure"},
        "unit": {"Description": "Web frontend", "After": "network.target"},
    })
    assert unit.text == (
        "[Unit]\n"
        "Description=Web frontend\n"
        "After=network.target\n"
        "\n"
        "[Service]\n"
        "ExecStart=/usr/bin/web\n"
        "Restart=on-failure\n"
        "User=www\n"
        "Environment=PORT=8080\n"
        "Environment=MODE=production\n"
        "\n"
        "[Install]\n"
        "WantedBy=multi-user.target\n"
    )


def test_rendering_is_deterministic() -> None:
    descriptor = ServiceDescriptor.from_dict("web", {
        "unit": {"Description": "Web", "Wants": ["a.service", "b.service"]},
        "service": {"ExecStart": "/usr/bin/web", "LimitNOFILE": 65536, "NUMAAffinity": [0, 1]},
        "environment": {"A": "1", "B": "two words"},
    })
    renderer = UnitRenderer()
    assert renderer.render(descriptor).text.encode() == renderer.render(descriptor).text.encode()
    assert UnitRenderer().render(descriptor) == renderer.render(descriptor)


def test_absent_fields_are_omitted() -> None:
    unit = render({"service": {"ExecStart": "/usr/bin/web"}})
    keys = [line.split("=", 1)[0] for line in unit.text.splitlines() if "=" in line]
    assert keys == ["ExecStart"]
    assert "[Unit]" not in unit.text
    assert "[Install]" not in unit.text


def test_every_schema_value_appears_once_under_its_key() -> None:
    service = {
        "Type": "simple",
        "ExecStart": "/usr/bin/web",
        "Restart": "always",
        "User": "www",
        "Group": "www",
        "WorkingDirectory": "/srv/web",
        "Nice": -5,
        "UMask": "0027",
        "LimitNOFILE": 65536,
        "LimitNPROC": 512,
        "LimitRTPRIO": 0,
        "LimitSTACK": "8M",
        "TasksMax": 256,
        "PrivateTmp": "yes",
        "ProtectSystem": "strict",
        "IOWeight": 200,
        "BlockIOWeight": 300,
        "CPUWeight": 50,
        "NUMANode": 1,
        "Slice": "web.slice",
    }
    lines = section_lines(render({"service": service}).text, "Service")
    for key, value in service.items():
        assert lines.count(f"{key}={value}") == 1
    assert len(lines) == len(service)


def test_lists_render_as_repeated_keys() -> None:
    unit = render({
        "unit": {"After": ["network.target", "db.service"]},
        "service": {
            "ExecStart": "/usr/bin/web",
            "IOWeightDevice": ["/dev/sda 200", "/dev/sdb 100"],
            "NUMAAffinity": [0, 2],
            "ExecStartPre": [],
        },
    })
    assert section_lines(unit.text, "Unit") == ["After=network.target", "After=db.service"]
    assert section_lines(unit.text, "Service") == [
        "ExecStart=/usr/bin/web",
        "IOWeightDevice=/dev/sda 200",
        "IOWeightDevice=/dev/sdb 100",
        "NUMAAffinity=0",
        "NUMAAffinity=2",
    ]


def test_boolean_like_strings_pass_through() -> None:
    unit = render({"service": {"PrivateTmp": "true", "ProtectHome": "read-only", "NoNewPrivileges": "no"}})
    assert section_lines(unit.text, "Service") == [
        "NoNewPrivileges=no",
        "ProtectHome=read-only",
        "PrivateTmp=true",
    ]


def test_unknown_directives_follow_known_ones() -> None:
    unit = render({"service": {"OOMScoreAdjust": -100, "ExecStart": "/usr/bin/web", "Sockets": ["a.socket"]}})
    assert section_lines(unit.text, "Service") == [
        "ExecStart=/usr/bin/web",
        "OOMScoreAdjust=-100",
        "Sockets=a.socket",
    ]


def test_environment_values_are_quoted_when_needed() -> None:
    unit = render({"environment": {"GREETING": 'say "hi"', "PATHS": "a b", "WIN": "C:\\tmp", "MSG": "it's"}})
    assert section_lines(unit.text, "Service") == [
        'Environment="GREETING=say \\"hi\\""',
        'Environment="PATHS=a b"',
        'Environment="WIN=C:\\\\tmp"',
        'Environment="MSG=it\'s"',
    ]


def test_environment_only_descriptor_gets_service_section() -> None:
    unit = render({"environment": {"A": "1"}})
    assert unit.text == "[Service]\nEnvironment=A=1\n"


def test_empty_descriptor_renders_empty_text() -> None:
    assert render({}).text == ""


@pytest.mark.parametrize(
    "service, field",
    [
        ({"User": 1000}, "User"),
        ({"ExecStart": ["/usr/bin/web"]}, "ExecStart"),
        ({"Nice": "10"}, "Nice"),
        ({"Nice": 1.5}, "Nice"),
        ({"LimitNOFILE": True}, "LimitNOFILE"),
        ({"PrivateTmp": True}, "PrivateTmp"),
        ({"IOWeightDevice": "/dev/sda 200"}, "IOWeightDevice"),
        ({"IOWeightDevice": ["/dev/sda", 200]}, "IOWeightDevice"),
        ({"NUMAAffinity": [0, "1"]}, "NUMAAffinity"),
        ({"User": None}, "User"),
        ({"ExecStart": "/usr/bin/web\nUser=root"}, "ExecStart"),
        ({"ExecStart": "/bin/\ud800"}, "ExecStart"),
        ({"CustomDirective": {"a": 1}}, "CustomDirective"),
        ({"CustomDirective": False}, "CustomDirective"),
        ({"bad-key": "x"}, "bad-key"),
    ],
)
def test_type_mismatch_names_field_and_descriptor(service: dict, field: str) -> None:
    with pytest.raises(InvalidFieldValue) as excinfo:
        render({"service": service}, name="api")
    assert excinfo.value.descriptor == "api"
    assert excinfo.value.field == field
    assert "'api'" in str(excinfo.value)


@pytest.mark.parametrize(
    "body, field",
    [
        ({"unit": {"Description": None}}, "unit.Description"),
        ({"install": {"WantedBy": [["nested"]]}}, "install.WantedBy"),
        ({"environment": {"PORT": [80]}}, "environment.PORT"),
        ({"environment": {"BAD-NAME": "x"}}, "environment.BAD-NAME"),
        ({"environment": {"A": "line\nbreak"}}, "environment.A"),
        ({"unit": {"Description": "caf\udce9"}}, "unit.Description"),
    ],
)
def test_free_form_sections_are_checked(body: dict, field: str) -> None:
    with pytest.raises(InvalidFieldValue) as excinfo:
        render(body)
    assert excinfo.value.field == field


def test_custom_extension() -> None:
    descriptor = ServiceDescriptor.from_dict("web", {"service": {"ExecStart": "/bin/true"}})
    assert UnitRenderer(extension="unit").render(descriptor).filename == "web.unit"
