# pluginhub

Building blocks for a small web backend with plugins:

- accounts without passwords, verified by e-mail
- SHA-256 access tokens and a check of the `Authorization` header
- a role/permission database schema kept in SQLite, with ordered migrations
- a registry of plugins described by JSON configuration files

Nothing outside the standard library is needed.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `pluginhub.hashing`

- `random_bytes()` returns 32 cryptographically secure random bytes.
- `hash_bytes(data)` returns the lower-case hex SHA-256 digest of `data`. The
  input must be exactly 32 bytes long; any other length raises `ValueError`.
- `random_string(length)` returns `length` random ASCII letters and digits.
  A negative length raises `ValueError`.

### `pluginhub.errors`

`RouterError` is the base class of the errors that handlers raise. Each kind
has its own HTTP status:

| class           | status |
|-----------------|--------|
| `AuthError`     | 401    |
| `NotFoundError` | 404    |
| `ExpiredError`  | 410    |
| `UsedError`     | 410    |
| `InternalError` | 500    |

`str(error)` is the message (`"InternalError"` for `InternalError`, which
takes no arguments). `error.response()` returns an `ErrorResponse` with
`status`, `content_type` (`text/plain; charset=utf-8`) and `body`.

### `pluginhub.token`

- `TokenGenerator(source)` holds a byte source. `generate()` stores the SHA-256
  hex digest of the source in `result` and returns it; `result` is `None` until
  then.
- `TokenChecker` is an abstract class with one coroutine,
  `get_user_id(request_token)`, that returns the identity for a valid token or
  `None`.
- `TokenAuth(finder)` wraps a `TokenChecker`. `await authenticate(headers)`
  looks up the `Authorization` header (name matched case-insensitively, `str`
  or `bytes` names and values accepted), passes its value to the checker and
  returns the identity. A missing header, a value that is not printable ASCII,
  or a `None` from the checker raises `AuthError("This Token is not valid")`.

```python
import asyncio
from pluginhub.token import TokenAuth, TokenChecker

class Checker(TokenChecker[int]):
    async def get_user_id(self, request_token):
        return 1 if request_token == "Bearer token" else None

user_id = asyncio.run(TokenAuth(Checker()).authenticate({"Authorization": "Bearer token"}))
```

### `pluginhub.config`

`PluginConfig.from_json(data)` reads a plugin configuration from `bytes` or
`str`. The document must be a JSON object with an `abi` key; every other
top-level key is kept in `metadata`. The ABI is a `PluginAbi` holding a list of
`PluginAbiFunction`s, each with a `name` and a `PluginAbiResult` whose `ty` is a
`PluginAbiParamType` (`STRING` for `"string"`, `NUMBER` for `"number"`).
Anything that is not valid JSON of this shape raises `ConfigError` (a
`ManagerError`). `to_dict()` gives the configuration back as a dictionary ready
for `json.dumps`.

```python
from pluginhub.config import PluginConfig

config = PluginConfig.from_json(b"""
{
  "name": "greeter",
  "version": "1.0.0",
  "abi": {"functions": [{"name": "hello", "result": {"type": "string"}}]}
}
""")
config.metadata["name"]           # "greeter"
config.abi.functions[0].result.ty # PluginAbiParamType.STRING
```

### `pluginhub.manager`

- `PluginBuilder(config, source)` pairs a `PluginConfig` with the plugin's
  WebAssembly bytes. `metadata()` returns a `PluginMetadata` with the `name`
  and `version` from the config, `abi()` a copy of the ABI, `source()` the
  bytes; `permissions()` and `routers()` return empty lists.
- `PluginSystem.get_left_right()` creates an empty registry and returns a
  `(PluginSystemWriter, PluginSystemReader)` pair.
- The writer's `add(plugin)`, `remove(plugin)` and
  `add_from_config(wasm_as_bytes, config)` queue changes keyed by the plugin's
  metadata name. Readers see none of them until `publish()` applies the queue.
  `add`, `remove` and `publish` return the writer, so calls can be chained.
- `PluginSystemReader.get(name)` returns the published plugin or `None`.
  `BuilderReader` is another name for `PluginSystemReader`.

```python
from pluginhub.manager import PluginSystem

writer, reader = PluginSystem.get_left_right()
writer.add_from_config(b"\0asm", config)
reader.get("greeter")   # None
writer.publish()
reader.get("greeter")   # the PluginBuilder
```

### `pluginhub.schema`

Dataclasses for the rows of each table — `User`, `Post`, `Token`,
`EmailVerification`, `Role`, `Permission` and `RolePermission` — each with its
table name in `TABLE`. `MIGRATIONS` is the ordered tuple of `Migration` steps
that create these tables.

`Migrator(conn)` works on a `sqlite3.Connection` and records applied steps in
a `seaql_migrations` table:

- `up(steps=None)` applies pending migrations, all or at most `steps`, and
  returns their names;
- `down(steps=None)` reverts applied migrations newest first, all or at most
  `steps`, and returns their names;
- `applied()` and `pending()` list migration names.

A negative `steps` raises `ValueError`.

### `pluginhub.mailer`

`EmailManager(host, port, username, password, default_from)` sends mail
through one SMTP relay. `await send_email(to, subject, body)` sends `body` as
an HTML message from `default_from`, using STARTTLS and logging in first. An
address that is not a valid mailbox raises `ValueError`.

```python
from pluginhub.mailer import EmailManager

password = "password"
mailer = EmailManager("smtp.example.com", 587, "mailer@example.com", password,
                      "Accounts <accounts@example.com>")
```

### `pluginhub.accounts`

The account flow works on a `sqlite3.Connection` whose tables were created by
`Migrator.up()`.

- `send_verification_email(user_email, emailer, conn, debug=False)`: with
  `debug=True` it calls `create_verification_url_debug`, otherwise
  `send_verification_url`.
- `create_verification_url_debug(conn, user_email)` stores a new verification
  code and returns the path `/verify/<code>` instead of mailing it.
- `send_verification_url(emailer, conn, user_email, api_url=None)` refuses
  with `UsedError` when the newest stored verification is 20 seconds old or
  less; otherwise it stores a new code, mails the link
  `<api_url>/account/verify/<code>` through `emailer.send_email` and returns
  the code's UUID. When `api_url` is not given it is read from the `API_URL`
  environment variable, and `RuntimeError` is raised if that is not set.
  Database or mail failures raise `InternalError`.
- `verify(conn, code)` raises `NotFoundError` for an unknown code and
  `ExpiredError` for a code already verified or 70 seconds old or more.
  Otherwise it marks the code verified, creates a user with a random name of
  `u` and eight letters and digits if none has that e-mail address, and returns
  `"Your account has been verifed"`.
- `get_profile(conn, user_id)` returns a `UserProfile` (`username`, `email`),
  or raises `InternalError` when there is no such user.
- `current_time_stamp()` returns seconds since the Unix epoch and
  `generate_uuid()` a new random UUID as text.

## Database migrations from the command line

```
pluginhub-migrate --help
pluginhub-migrate -u sqlite://app.db up
pluginhub-migrate -u sqlite://app.db status
```

The database URL comes from `-u`/`--database-url` or the `DATABASE_URL`
environment variable and must start with `sqlite:`. Commands:

- `up [-n N]` — apply pending migrations (all by default)
- `down [-n N]` — revert the newest applied migrations (one by default)
- `status` — print `Applied` or `Pending` for every migration
- `fresh` — drop every table, then apply everything
- `refresh` — revert everything, then apply everything
- `reset` — revert every applied migration

## What the package does not do

- There is no HTTP server and no routing. The account functions, `TokenAuth`
  and the `RouterError` responses are meant to be called from a web framework
  of your choice.
- Plugins are only registered. Their WebAssembly source is kept as bytes; the
  package does not compile, instantiate or call it.
- Storage is SQLite only, for both the account functions and the migration
  command.