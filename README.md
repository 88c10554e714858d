# apigw-kit

A small library for calling services behind an API gateway, reading gateway
definitions, and verifying the JWT tokens a gateway attaches to forwarded
requests.

## Install

```
pip install apigw-kit
```

To run the test suite:

```
pip install "apigw-kit[test]"
pytest
```

## Modules

- `apigw_kit.client`
  - `OperationConfig(name, method, path)` describes one gateway resource.
  - `BkApiClient(name, config, *, operation_factory=Operation, session=None)`
    takes any `config` object with a `url` attribute, and optionally
    `authorization_headers` (a mapping sent with every request) and `logger`.
    An empty `url` raises `ConfigInvalidError`.
  - `new_operation(config, *options)` builds an operation. The path is
    appended to the base URL, `User-Agent` is set to `apigw-kit`, and the
    client's common options and then the given options are applied. If no
    name is given, the operation is named `(METHOD path)`.
  - `apply(*options)` applies client options. The first failure is raised as
    a `BkApiError` chained to its cause.
  - `add_operation_options(*options)` registers options that are applied to
    every later operation.
  - When a logger is set, each response is logged at debug level for 2xx and
    other codes, warning level for 4xx, and error level for 5xx. The gateway
    details, `operation`, `status` and `status_code` are passed as `extra`.
  - `BkApiClientOption(fn)` wraps a function that configures a client. It
    raises `TypeNotMatchError` for anything that is not a `BkApiClient`.
- `apigw_kit.operation`
  - `Operation` has chaining setters: `set_headers`, `set_query_params`,
    `set_path_params`, `set_body`, `set_body_reader`, `set_body_provider`,
    `set_result`, `set_result_provider`, `set_content_type`,
    `set_content_length`.
  - `request()` sends the operation and returns the `requests.Response`.
    Before sending, a body provider (`provide_body(operation, data)`) is
    called. After the response arrives, a result provider
    (`provide_result(response, result)`) is called.
  - An option that failed in `apply` is kept and raised by `request()`.
  - A non-2xx response that has an `X-Bkapi-Error-Code` header is raised as
    `BkApiResponseDetail`.
  - `full_name()` returns `<client>.api.<operation>`.
  - `Request` is the HTTP request underneath. It has hooks run before sending
    (`use`) and after receiving (`use_response`). Hooks act on a fresh copy
    on each send.
  - `OperationOption(fn)` configures one operation. When applied to a client,
    it registers itself for every operation.
- `apigw_kit.option`: `PluginOption(*hooks)` installs request hooks on a
  client (for all its requests) or on a single operation.
- `apigw_kit.placeholder`: `replace_placeholder("/hello/{name}", {"name": "world"})`
  returns `"/hello/world"`. `{ name }` with spaces also matches. Unknown
  placeholders are left as they are.
- `apigw_kit.response_detail`: `BkApiResponseDetail` holds `request_id`,
  `error_code` and `error_message`. Use `from_headers` to read the
  `X-Bkapi-*` response headers, with names matched case-insensitively.
  `get_error()` returns the detail only when an error code is present.
  `as_dict()` returns the non-empty fields.
- `apigw_kit.definition`: `Definition` wraps a nested mapping, usually built
  with `Definition.from_yaml(...)`. `get("a.b")` returns the sub-mapping, and
  `get("")` returns the whole definition. A missing key or a non-mapping
  value raises `NotFoundError`.
- `apigw_kit.context`: `DefinitionContext(api_name, config)` builds the
  template variables `settings` (`BK_APIGW_NAME`, `BK_APP_CODE`,
  `BK_APP_SECRET` from the config's `app_code` and `app_secret`), `environ`
  (the process environment) and `data`.
- `apigw_kit.tokens`: `RsaJwtTokenParser(provider).parse(token)` reads the
  gateway name from the `kid` header. It gets that gateway's PEM key from
  `provider.provide_public_key(name)` and verifies the token with an RSA
  algorithm. It returns `ApigatewayJwtClaims` with `api_name`, `app`
  (`ApigatewayJwtApp`), `user` (`ApigatewayJwtUser`) and the standard claims.
  A missing or non-string `kid` raises `KidInvalidError`.
- `apigw_kit.publickey`
  - `PublicKeySimpleProvider` serves keys from a fixed mapping. An unknown
    name gives `""`.
  - `PublicKeyMemoryCache(config, expiration, manager_factory)` calls
    `manager_factory(api_name, config).get_public_key_string()` on a miss.
    It caches the key for `expiration` plus up to ten seconds of random
    jitter. Failures are not cached.
- `apigw_kit.errors`: every error derives from `BkApiError`.

## Example

```python
from types import SimpleNamespace

from apigw_kit.client import BkApiClient, OperationConfig

config = SimpleNamespace(url="http://api.example.com/prod")
client = BkApiClient("demo", config)
op = client.new_operation(
    OperationConfig(name="status_code", method="GET", path="/status/{code}")
)
response = op.set_path_params({"code": "200"}).request()
print(response.status_code)
```

Parsing a gateway token:

```python
from apigw_kit.publickey import PublicKeySimpleProvider
from apigw_kit.tokens import RsaJwtTokenParser

parser = RsaJwtTokenParser(PublicKeySimpleProvider({"my-gateway": public_key_pem}))
claims = parser.parse(token)
print(claims.api_name, claims.app, claims.user)
```

## What it does not do

- It has no gateway manager. Nothing here syncs definitions, stages,
  resources or permissions to a gateway.
- It does not render definition templates from files. `DefinitionContext`
  only supplies the variables.
- `PublicKeyMemoryCache` needs a `manager_factory` that you supply. The
  package has no object that fetches public keys from a gateway.
- There are no ready-made JSON body or result providers. Providers are plain
  objects with `provide_body` or `provide_result` methods that you write.
- There is no metrics collection and no command-line tool.