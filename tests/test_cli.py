import json
import re

from twofa import crypto
from twofa.otp import generate_code
from twofa.settings import Encoding, HashAlgorithm

PASSWORD = "correct horse"
SECRET = "JBSWY3DPEHPK3PXP"
OTHER_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def code_of(result):
    match = re.search(r"^Code: (\d{6})$", result.output, re.MULTILINE)
    assert match, result.output
    return match.group(1)


def current_code(secret):
    return generate_code(secret, Encoding.BASE32, HashAlgorithm.SHA512, 30)


def stored_document(paths):
    return json.loads(crypto.decrypt_bytes(PASSWORD, paths.encrypted_file.read_bytes()))


def init(invoke):
    r = invoke(["init", "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    return r


def test_init_set_get(invoke):
    r = init(invoke)
    assert "Storage created" in r.output
    assert stored_document(invoke.paths) == {}

    r = invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    assert "Stored github" in r.output
    assert stored_document(invoke.paths) == {
        "github": {"secret": SECRET, "window": 30, "hash": "sha512", "encoding": "base32"}
    }

    # the time step may roll over while the command runs
    before = current_code(SECRET)
    r = invoke(["get", "-a", "github", "-p", PASSWORD])
    after = current_code(SECRET)
    assert r.exit_code == 0, r.output
    assert code_of(r) in {before, after}
    assert not invoke.paths.plaintext_file.exists()


def test_set_with_overrides(invoke):
    init(invoke)
    r = invoke(["set", "-a", "bank", "-s", "3132333435", "-w", "60", "-h", "sha1", "-e", "hex", "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    assert stored_document(invoke.paths)["bank"] == {
        "secret": "3132333435", "window": 60, "hash": "sha1", "encoding": "hex",
    }


def test_password_is_prompted(invoke):
    r = invoke(["init"], input_text=f"{PASSWORD}\n{PASSWORD}\n")
    assert r.exit_code == 0, r.output
    r = invoke(["set", "-a", "github", "-s", SECRET], input_text=f"{PASSWORD}\n")
    assert r.exit_code == 0, r.output


def test_overwrite_declined_keeps_previous_settings(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])

    for answer in ("n", "yes", "Y", ""):
        r = invoke(["set", "-a", "github", "-s", OTHER_SECRET, "-p", PASSWORD], input_text=f"{answer}\n")
        assert r.exit_code == 0, r.output
        assert "Stopping action" in r.output
        assert "Stored" not in r.output
        assert stored_document(invoke.paths)["github"]["secret"] == SECRET

    before = current_code(SECRET)
    r = invoke(["get", "-a", "github", "-p", PASSWORD])
    assert code_of(r) in {before, current_code(SECRET)}
    assert not invoke.paths.plaintext_file.exists()


def test_overwrite_prompt_at_end_of_input_declines(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])

    r = invoke(["set", "-a", "github", "-s", OTHER_SECRET, "-p", PASSWORD], input_text="")
    assert r.exit_code == 0, r.output
    assert "Stopping action" in r.output
    assert "Aborted" not in r.output
    assert stored_document(invoke.paths)["github"]["secret"] == SECRET
    assert not invoke.paths.plaintext_file.exists()


def test_overwrite_confirmed(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])
    r = invoke(["set", "-a", "github", "-s", OTHER_SECRET, "-p", PASSWORD], input_text="y\n")
    assert r.exit_code == 0, r.output
    assert stored_document(invoke.paths)["github"]["secret"] == OTHER_SECRET


def test_get_unknown_application_exits_zero(invoke):
    init(invoke)
    r = invoke(["get", "-a", "nope", "-p", PASSWORD])
    assert r.exit_code == 0
    assert "Application does not exist" in r.output
    assert "Code:" not in r.output


def test_wrong_password(invoke):
    init(invoke)
    r = invoke(["get", "-a", "github", "-p", "wrong"])
    assert r.exit_code == 1
    assert "Could not decrypt file" in r.output
    assert not invoke.paths.plaintext_file.exists()


def test_get_before_init(invoke):
    r = invoke(["get", "-a", "github", "-p", PASSWORD])
    assert r.exit_code == 1
    assert "init" in r.output


def test_set_requires_secret(invoke):
    init(invoke)
    r = invoke(["set", "-a", "github", "-p", PASSWORD])
    assert r.exit_code == 1
    assert "Secret is needed" in r.output
    assert not invoke.paths.plaintext_file.exists()


def test_set_rejects_unknown_hash(invoke):
    init(invoke)
    r = invoke(["set", "-a", "github", "-s", SECRET, "-h", "md5", "-p", PASSWORD])
    assert r.exit_code == 1
    assert "Hash not supported" in r.output
    assert stored_document(invoke.paths) == {}


def test_init_twice_declined(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])
    r = invoke(["init", "-p", PASSWORD], input_text="n\n")
    assert r.exit_code == 0
    assert "Stopping action" in r.output
    assert "github" in stored_document(invoke.paths)


def test_init_prompt_at_end_of_input_declines(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])

    r = invoke(["init", "-p", PASSWORD], input_text="")
    assert r.exit_code == 0, r.output
    assert "Stopping action" in r.output
    assert "Aborted" not in r.output
    assert "github" in stored_document(invoke.paths)
    assert not invoke.paths.plaintext_file.exists()


def test_init_clears_stale_plaintext(invoke):
    invoke.paths.directory.mkdir()
    invoke.paths.plaintext_file.write_text('{"leaked": true}')

    r = invoke(["init", "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    assert "Removing stale plaintext file" in r.output
    assert stored_document(invoke.paths) == {}
    assert not invoke.paths.plaintext_file.exists()


def test_init_twice_confirmed(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])
    r = invoke(["init", "-p", PASSWORD], input_text="y\n")
    assert r.exit_code == 0, r.output
    assert stored_document(invoke.paths) == {}


def test_storage_dir_file_rejected_by_option_type(invoke):
    # click.Path(file_okay=False) refuses it before any storage code runs
    invoke.paths.directory.write_text("oops")
    r = invoke(["init", "-p", PASSWORD])
    assert r.exit_code != 0
    assert "is a file" in r.output


def test_unsupported_action(invoke):
    r = invoke(["list"])
    assert r.exit_code != 0


def test_debug_levels(invoke):
    init(invoke)
    r = invoke(["-ddd", "set", "-a", "github", "-s", SECRET, "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    assert "DEBUG: Action: set, App: github" in r.output
    assert "DEBUG: Merged applications: ['github']" in r.output
    assert SECRET not in r.output

    r = invoke(["get", "-a", "github", "-p", PASSWORD])
    assert "DEBUG" not in r.output

    r = invoke(["-dddd", "get", "-a", "github", "-p", PASSWORD])
    assert "LogLevel '4' not supported. Norm chosen." in r.output
    assert "DEBUG" not in r.output


def test_max_level_adds_stored_key_details(invoke):
    init(invoke)
    invoke(["set", "-a", "github", "-s", SECRET, "-p", PASSWORD])

    r = invoke(["-dd", "get", "-a", "github", "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    assert "DEBUG: Applications in storage: ['github']" in r.output
    assert "Stored key accepted" not in r.output

    r = invoke(["-ddd", "get", "-a", "github", "-p", PASSWORD])
    assert r.exit_code == 0, r.output
    assert "DEBUG: Stored key accepted: secret" in r.output
    assert "DEBUG: Stored key accepted: encoding" in r.output
    assert SECRET not in r.output
