import pytest

from taidan.catalogue import (
    Action,
    ActionKind,
    CatalogueError,
    Category,
    Checkbox,
    Choice,
    ChoiceActions,
    Config,
    Radio,
    catalogue_dir,
    load_catalogue,
    load_category,
    read_distro_name,
)

BROWSER_YAML = """\
category: Browser
choices:
  - name: Firefox
    provider: Mozilla
    description: |
      A free and open
      web browser
    note: "Fast\\n"
    options:
      - checkbox: Install extras
      - radio: [Stable, Beta, Nightly]
    actions:
      - - rpm:firefox
        - rpm:firefox-beta
        - todo
      - - rpm:firefox;rpm:extras
        - flatpak:org.example.Beta
        - shell:echo nightly
  - name: Lynx
    provider: Fedora
    description: Text browser
    actions: rpm:lynx
"""


@pytest.fixture
def browser(tmp_path):
    path = tmp_path / "browser.yml"
    path.write_text(BROWSER_YAML)
    return load_category(path)


def test_category_name_and_choices(browser):
    assert browser.name == "Browser"
    assert [c.name for c in browser.choices] == ["Firefox", "Lynx"]


def test_options_parsed(browser):
    assert browser.choices[0].options == (
        Checkbox("Install extras"),
        Radio(("Stable", "Beta", "Nightly")),
    )
    assert [o.dimension() for o in browser.choices[0].options] == [2, 3]


def test_description_and_note_flattened(browser):
    firefox = browser.choices[0]
    assert firefox.description == "A free and open web browser"
    assert "\n" not in firefox.note
    assert firefox.note == firefox.note.rstrip()
    assert browser.choices[1].note is None


def test_get_actions_traversal(browser):
    actions = browser.choices[0].actions
    assert actions.get_actions([0, 0]) == (Action(ActionKind.RPM, "firefox"),)
    assert actions.get_actions([1, 0]) == (
        Action(ActionKind.RPM, "firefox"),
        Action(ActionKind.RPM, "extras"),
    )
    assert actions.get_actions([1, 2]) == (Action(ActionKind.SHELL, "echo nightly"),)


def test_get_actions_none_cases(browser):
    actions = browser.choices[0].actions
    assert actions.get_actions([0, 2]) is None
    assert actions.get_actions([0]) is None
    assert actions.get_actions([5, 0]) is None
    assert actions.get_actions([0, 0, 0]) is None


def test_choice_without_options(browser):
    lynx = browser.choices[1]
    assert lynx.options == ()
    assert lynx.actions.get_actions([]) == (Action(ActionKind.RPM, "lynx"),)


def test_todo_expands_to_dimension():
    choice = Choice.from_mapping(
        {
            "name": "x",
            "provider": "p",
            "description": "d",
            "options": [{"radio": ["a", "b", "c"]}],
            "actions": "todo",
        }
    )
    assert len(choice.actions.children) == 3
    assert all(choice.actions.get_actions([i]) is None for i in range(3))
    assert all(child.todo for child in choice.actions.children)


def test_dimension_mismatch():
    with pytest.raises(CatalogueError, match="sequence of"):
        Choice.from_mapping(
            {
                "name": "x",
                "provider": "p",
                "description": "d",
                "options": [{"checkbox": "c"}],
                "actions": ["rpm:a"],
            }
        )


def test_leaf_must_be_string():
    with pytest.raises(CatalogueError, match="Expected string at depth"):
        Choice.from_mapping(
            {"name": "x", "provider": "p", "description": "d", "actions": 5}
        )


def test_missing_actions():
    with pytest.raises(CatalogueError, match="actions"):
        Choice.from_mapping({"name": "x", "provider": "p", "description": "d"})


@pytest.mark.parametrize(
    "option, message",
    [
        ("checkbox", "Expected yaml mapping"),
        ({"checkbox": "a", "radio": ["b"]}, "2-key element"),
        ({"slider": "a"}, "Unexpected key `slider:`"),
        ({"checkbox": ["a"]}, "in `checkbox:`"),
        ({"radio": "a"}, "in `radio:`"),
        ({"radio": ["a", 1]}, "in `radio:` sequence"),
    ],
)
def test_bad_options(option, message):
    with pytest.raises(CatalogueError, match=message):
        Choice.from_mapping(
            {
                "name": "x",
                "provider": "p",
                "description": "d",
                "options": [option],
                "actions": "todo",
            }
        )


def test_parse_todo():
    assert ChoiceActions.parse("todo").todo is True
    assert ChoiceActions.parse("todo").get_actions([]) is None


def test_parse_list_skips_untyped_parts():
    parsed = ChoiceActions.parse("rpm:a;junk;copr:owner/proj")
    assert parsed.get_actions([]) == (
        Action(ActionKind.RPM, "a"),
        Action(ActionKind.COPR, "owner/proj"),
    )


def test_parse_untyped_is_shell():
    assert ChoiceActions.parse("echo hi").get_actions([]) == (
        Action(ActionKind.SHELL, "echo hi"),
    )


def test_parse_splits_on_first_colon():
    assert ChoiceActions.parse("shell:a:b").get_actions([]) == (
        Action(ActionKind.SHELL, "a:b"),
    )


def test_unknown_action_type():
    with pytest.raises(CatalogueError, match="Unknown action type `foo`"):
        ChoiceActions.parse("foo:bar")
    with pytest.raises(CatalogueError, match="Unknown action type"):
        Action.from_pair("Rpm", "x")


def test_action_kind_numbers():
    assert Action.from_pair("enable_yum_repo", "r").kind == 0
    assert Action.from_pair("flatpak", "f").kind == 2
    assert Action.from_pair("copr", "c").kind == 4


def test_category_requires_choices():
    with pytest.raises(CatalogueError, match="choices"):
        Category.from_mapping({"category": "Empty"})


def test_load_catalogue(tmp_path):
    (tmp_path / "b.yml").write_text(BROWSER_YAML)
    (tmp_path / "a.yml").write_text(
        "category: Office\nchoices:\n  - name: Writer\n    provider: p\n"
        "    description: d\n    actions: flatpak:org.example.Writer\n"
    )
    catalogue = load_catalogue(tmp_path)
    assert [c.name for c in catalogue] == ["Office", "Browser"]


def test_load_catalogue_missing_dir(tmp_path):
    with pytest.raises(CatalogueError, match="Cannot read catalogue dir"):
        load_catalogue(tmp_path / "nope")


def test_load_category_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("category: [unclosed")
    with pytest.raises(CatalogueError, match="Invalid yaml"):
        load_category(path)


def test_catalogue_dir_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TAIDAN_CATALOGUE_DIR", str(tmp_path))
    assert catalogue_dir("/default") == tmp_path


def test_catalogue_dir_env_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("TAIDAN_CATALOGUE_DIR", str(tmp_path / "missing"))
    assert str(catalogue_dir("/default")) == "/default"
    monkeypatch.delenv("TAIDAN_CATALOGUE_DIR")
    assert str(catalogue_dir("/default")) == "/default"


def test_read_distro_name(tmp_path):
    path = tmp_path / "os-release"
    path.write_text('PRETTY_NAME="Pretty"\nNAME="Ultramarine Linux"\nID=um\n')
    assert read_distro_name(path) == "Ultramarine Linux"
    path.write_text("NAME=Fedora\n")
    assert read_distro_name(path) == "Fedora"
    path.write_text('NAME="Half\n')
    assert read_distro_name(path) == '"Half'


def test_read_distro_name_missing(tmp_path):
    path = tmp_path / "os-release"
    path.write_text("ID=um\n")
    with pytest.raises(CatalogueError, match="NAME="):
        read_distro_name(path)


def test_config_load(tmp_path, monkeypatch):
    monkeypatch.delenv("TAIDAN_CATALOGUE_DIR", raising=False)
    catdir = tmp_path / "catalogue"
    catdir.mkdir()
    (catdir / "browser.yml").write_text(BROWSER_YAML)
    os_release = tmp_path / "os-release"
    os_release.write_text('NAME="Ultramarine Linux"\n')
    config = Config.load(catdir, os_release)
    assert config.distro == "Ultramarine Linux"
    assert config.find_category("Browser").choices[1].name == "Lynx"
    assert config.find_category("Games") is None