# taidan

The backend of a first-boot setup assistant for Linux systems. It reads an
application catalogue written in YAML, works out which packages, Flatpaks,
repositories, COPR projects and scripts the user picked, and runs the
installation in stages: creating the user account, enabling time
synchronisation, applying the theme and night light, then downloading and
installing system updates and the chosen programs with `dnf5` and `flatpak`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The catalogue (`taidan.catalogue`)

Each file in the catalogue directory describes one category:

```yaml
category: Browser
choices:
  - name: Firefox
    provider: Mozilla
    description: A free web browser.
    options:
      - checkbox: Install as Flatpak
    actions:
      - "rpm:firefox"
      - "flatpak:org.mozilla.firefox"
```

The `actions:` entry is nested one level for every option: a `checkbox:`
option has two entries (off, on), a `radio:` option has one entry per choice.
In place of a nested sequence, the string `todo` stands for a sequence of the
right length filled with `todo`. A leaf is either a single action such as
`rpm:firefox`, several actions separated by `;`, a bare command (treated as a
`shell` action), or `todo`. The known action types are `enable_yum_repo`,
`rpm`, `flatpak`, `shell` and `copr` (`ActionKind`). Line breaks in
`description:` and `note:` are turned into spaces and trailing whitespace is
removed. Any malformed file raises `CatalogueError`.

- `load_category(path)` reads one file; `load_catalogue(directory)` reads
  every file of a directory in sorted order.
- `catalogue_dir(default)` returns the directory named by the
  `TAIDAN_CATALOGUE_DIR` environment variable when it exists, otherwise
  `default`.
- `read_distro_name(path)` returns the `NAME=` value of an os-release file,
  without surrounding quotes.
- `Config.load(default_catalogue_dir, os_release)` combines both;
  `Config.find_category(name)` looks a category up by name.
- `ChoiceActions.get_actions(opts)` returns the actions for the selected
  option values, or `None` when the selection leads to nothing or to `todo`.

```python
from taidan.catalogue import Config

config = Config.load("/etc/taidan/catalogue/", "/etc/os-release")
browser = config.find_category("Browser")
firefox = browser.choices[0]
print(firefox.actions.get_actions([1]))
```

## Settings and stages

`taidan.settings.Settings` holds what the user chose: account details, theme,
accent (`taidan.theme.AccentColor`), night light, whether there is Internet
access, and `catalogue`, which maps a category name to a choice index to the
selected option values. `actions_of(kind)` returns the collected values of one
action kind.

`taidan.stages.Stage` lists the seven stages in order; `label()` gives the
translated text shown while a stage runs and `is_dnf()` tells whether it runs
the package manager.

## Running an installation (`taidan.installer`)

`start_install(settings, config, emit)` runs every stage in order. Before the
"download apps" stage, unless `nointernet` is set, the actions of the selected
catalogue choices are collected into `settings.actions`
(`taidan.steps.collect_actions`). Progress is passed to `emit` as
`StageChanged`, `DnfProgress`, `FlatpakProgress` and `Finished` events from
`taidan.progress`; `InstallProgress` turns them into the values a progress
display needs.

```python
import asyncio
from taidan.catalogue import Config
from taidan.installer import start_install
from taidan.progress import InstallProgress
from taidan.settings import Settings

config = Config.load("/etc/taidan/catalogue/", "/etc/os-release")
password = "password"
settings = Settings(username="alice", fullname="Alice", passwd=password)
progress = InstallProgress()

def emit(event):
    progress.handle(event)
    print(progress.main_text())

asyncio.run(start_install(settings, config, emit))
```

`start_simple_install(settings, emit)` only creates the user and enables time
synchronisation, for when configuration is skipped.

The stages call `useradd`, `usermod`, `systemctl`, `dnf copr enable` and
`sh -c`; a failure of these raises `taidan.steps.StepError`. The theme and
night-light commands run through `pkexec`, and `dnf5` and `flatpak` are run by
`taidan.dnf.run_dnf` and `taidan.flatpak.run_flatpak`; their failures raise
`subprocess.CalledProcessError`. `set_theme` raises `RuntimeError` when
neither `/usr/bin/plasma-apply-colorscheme` nor `/usr/bin/gsettings` exists.
Repositories are enabled by `taidan.dnf.RepoEnabler`, which edits the files
in `/etc/yum.repos.d/` or downloads a repository file given by URL; an
unknown repository raises `LookupError`.

## What this package does not do

It has no screens and no command to start it: the pages that ask the user
for their name, password, theme and programs are not part of it. A caller
fills in `Settings` and runs the installer itself.