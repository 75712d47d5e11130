# keal

The core of a keyboard-driven application launcher, as a library. It finds
applications from XDG desktop entries, reads choices piped in the way dmenu
and rofi expect, runs user plugins that talk over standard input and
output, and ranks everything with a fuzzy matcher. It also counts how often
each entry is picked, so that frequent choices can be ranked first among
equal scores.

It needs Python 3.10 or later and depends on `cbor2` and `more-itertools`.

## What this package does not do

- It has no window and no command to run. A front end has to draw the
  input field and the list of entries itself.
- It does not carry out the actions plugins ask for. An `ActionKind.EXEC`
  action carries a `keal.plugin.Command` (program, arguments, environment,
  working directory); starting it, printing for `PRINT_AND_CLOSE`, forking
  for `FORK` and closing the window are left to the front end.
- No default configuration is shipped. Without a `config.ini` every
  setting keeps its empty default (no default plugins, font size 0, and so on).

## Configuration

`keal.config.Config.load(frontend)` reads `config.ini` from
`$XDG_CONFIG_HOME/keal` (falling back to `~/.config/keal`). Text after `#`
or `;` on a line is a comment.

```ini
[keal]
font = Iosevka
font_size = 16
icon_theme = Papirus,hicolor
usage_frequency = true
terminal_path = alacritty
placeholder_text = Search...
default_plugins = app

[colors]
background = 1e1e2eee
text = cdd6f4
scrollbar_enabled = true

[Session Manager.plugin]
prefix = session

[Session Manager.config]
log_out = swaymsg exit
```

- `[keal]` holds the general settings. Lists are comma separated, booleans
  are `true` or `false`. A value that does not parse is reported on
  standard error and ignored.
- The sections a `FrontendConfig` names are handed to it field by field.
  `keal.theme.Theme` reads `[keal]` and `[colors]`; colours are `rrggbb` or
  `rrggbbaa` hex, and it also takes `scrollbar_enabled` and
  `scrollbar_border_radius`.
- `[<plugin name>.plugin]` overrides a plugin's `prefix`, `icon` or `comment`.
- `[<plugin name>.config]` sets options a plugin declares; unknown options
  are reported and ignored.

`init_config(frontend)` loads the configuration once and `config()`
returns it afterwards.

Usage counts are kept in `$XDG_STATE_HOME/keal/usage.cbor` (falling back to
`~/.local/state/keal`); a file that cannot be decoded is deleted.

## Plugins

`PluginManager.load_plugins(arguments)` loads, when `arguments.dmenu` is
false, the user plugins and these built-in ones:

| Name            | Prefix | What it does                                   |
|-----------------|--------|------------------------------------------------|
| Applications    | `app`  | Offers installed desktop applications          |
| List            | `ls`   | Lists the loaded plugins and their prefixes    |
| Session Manager | `sm`   | Log out, suspend, hibernate, reboot, power off |

Typing a prefix followed by a space narrows the results to that plugin.
Otherwise the plugins listed in `default_plugins` are searched.

With `arguments.dmenu` set, only the Dmenu plugin is loaded. It reads its
choices from standard input, in rofi's extended format
(`name\0icon\x1f<icon>`) or, with `Protocol.KEAL`, in the user plugin
format below. Choosing an entry gives a `PRINT_AND_CLOSE` action with its
name, or with the query when nothing is selected.

`keal.arguments.parse_arguments(argv)` understands `-d/--dmenu`,
`-k/--keal`, `--timings`, `-h/--help` and `-v/--version`; the last two print
their text and raise `ExitRequested`, and any other flag raises
`UnknownFlagError`.

### User plugins

Each directory under `~/.config/keal/plugins/` holding a `config.ini` is
loaded as a plugin:

```ini
[plugin]
name = Emoji
prefix = em
exec = ./emoji.sh
icon = ./icon.svg
comment = Pick an emoji

[config]
skin_tone = default
```

`name`, `prefix` and `exec` are required. The program named by `exec` is
started in its own directory and sent the `[config]` values, one per line.
It answers with the events it wants (`events:enter query`) and a list of
entries made of `name:`, `icon:` and `comment:` lines, closed by `end`.
After an `enter` message (followed by the entry index) or a `query` message
(followed by the query) it replies with one action:
`action:change_input:<text>`, `action:change_query:<text>`,
`action:update:<index>` followed by one entry, `action:update_all` followed
by a new list, `action:fork`, `action:wait_and_close` or `action:none`.
Anything else raises `PluginProtocolError`.

## Driving the manager

```python
from keal.arguments import Arguments
from keal.config import Config
from keal.manager import PluginManager
from keal.matching import Matcher
from keal.worker import ActionMessage, AsyncManager, EntriesMessage, Launch, UpdateInput

config = Config(default_plugins=["app"])
worker = AsyncManager(
    Matcher(), 50, True,
    manager=PluginManager(config=config),
    arguments=Arguments(),
)

for message in worker.subscription([UpdateInput("fire", True), Launch(None)]):
    if isinstance(message, EntriesMessage):
        for entry in message.entries:
            print(entry.name, entry.score)
    elif isinstance(message, ActionMessage):
        print(message.action.kind)
```

## Matching and other helpers

```python
from keal.ini import Ini
from keal.matching import Matcher, Pattern
from keal.match_span import match_spans

ini = Ini.from_string("[colors]\ntext = ffffff\n", ["#", ";"])
print(ini.section("colors").to_dict())   # {'text': 'ffffff'}

matcher = Matcher()
pattern = Pattern.parse("fx")
print(pattern.score("Firefox", matcher) is not None)

for text, highlighted in match_spans("Firefox", matcher, pattern):
    print(text, highlighted)
```

A pattern is split on whitespace into atoms that must all match: fuzzy by
default, `'text` for a substring, `^text` for a prefix, `text$` for a
suffix, `^text$` for the whole item and `!text` for text that must not
appear.

Desktop entry `Exec` keys are expanded as the desktop entry specification
describes:

```python
from pathlib import Path
from keal.builtin.application import parse_exec_key

print(parse_exec_key("firefox %u", "Firefox", Path("/usr/share/applications/firefox.desktop"), None))
```

`keal.icon.IconCache.load(themes)` maps icon names to files found in the
given themes under the XDG icon directories and in `/usr/share/pixmaps`.