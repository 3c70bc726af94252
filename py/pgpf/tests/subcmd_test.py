# pytest tests
import os
import sys

import pytest

import base as b
import pgpf.argparser
import pgpf.cli
import pgpf.errors as err
from pgpf.facade import GnuPG

import tests.testbase as tb


@pytest.fixture
def facades(monkeypatch) -> list[GnuPG]:
    """Each subcommand run gets a fresh GnuPG on a FakeEngine; they are collected here."""
    made = []

    def make_facade(pargs):
        made.append(GnuPG(tb.FakeEngine(), tb.FakeKeyFinder(), tb.RecordingShredder()))
        return made[-1]
    monkeypatch.setattr(pgpf.cli, 'make_facade', make_facade)
    return made


def run(*argv: str):
    parser = pgpf.argparser.PgpfrontArgParser(description="-")
    parser.scan("pgpf.subcmd.*")
    parser.execute_subcommand(parser.parse_args(argv))


def write(filename: str, content: bytes):
    with open(filename, 'wb') as f:
        f.write(content)


def test_subcommands_are_found():
    parser = pgpf.argparser.PgpfrontArgParser(description="-")
    parser.scan("pgpf.subcmd.*")
    assert set(parser.subcommand_modules) == {'encrypt', 'sign', 'decrypt', 'keys'}
    assert "pgpfront 0.4.0" in parser.format_help()


def test_encrypt(facades):
    b._testmode_reset()
    with tb.TempDirEnvironContextMgr():
        write("a.txt", b"hello")
        run("encrypt", "-r", tb.GOOD.lower(), "--outdir", "out", "a.txt")
        assert b.slurp_bytes("out/a.txt.gpg") == f"ENC[{tb.GOOD}]:hello".encode()
        assert os.path.exists("a.txt")
        with pytest.raises(b.CritialError, match="output files exist already"):
            run("encrypt", "-r", tb.GOOD, "--outdir", "out", "a.txt")
        run("encrypt", "-r", tb.GOOD, "-s", tb.GOOD, "--outdir", "out", "--force",
            "--destroy", "--yes", "a.txt")
        assert b.slurp_bytes("out/a.txt.gpg") == f"ENC[{tb.GOOD}]:SIG[clear]:hello".encode()
        assert not os.path.exists("a.txt")
        assert facades[-1].shredder.shredded == ["a.txt"]
        assert all(gpg.keyfinder.closed for gpg in facades)
    b._testmode_reset()


def test_encrypt_for_revoked_key(facades):
    with tb.TempDirEnvironContextMgr():
        write("a.txt", b"hello")
        with pytest.raises(err.RevokedKey):
            run("encrypt", "-r", tb.REVOKED, "--destroy", "--yes", "a.txt")
        assert not os.path.exists("a.txt.gpg")
        assert os.path.exists("a.txt")


def test_sign_and_decrypt(facades):
    with tb.TempDirEnvironContextMgr():
        write("doc.md", b"text")
        run("sign", "-s", tb.GOOD, "--mode", "detach", "doc.md", "--names", "renamed.md")
        assert b.slurp_bytes("renamed.md.sig") == b"SIG[detach]:text"
        write("doc.md.gpg", b"ENC[x]:text")
        run("decrypt", "--outdir", "plain", "-k", tb.GOOD, "doc.md.gpg")
        assert b.slurp_bytes("plain/doc.md") == b"text"
        assert facades[-1].engine.decrypt_keys == {tb.GOOD: ""}


def test_keys(facades, capsys):
    b._testmode_reset()
    b.set_loglevel("INFO")
    with tb.TempDirEnvironContextMgr():
        run("keys", "info", tb.GOOD, tb.REVOKED, tb.NOWHERE, "--no-search")
        out, _ = capsys.readouterr()
        assert tb.GOOD in out and tb.REVOKED in out
        assert f"Could not find a public OpenPGP key with fingerprint [{tb.NOWHERE}]" in out
        with open("key.asc", 'wt') as f:
            f.write(f"KEY:{tb.NOWHERE}")
        run("keys", "import", "key.asc")
        out, _ = capsys.readouterr()
        assert f"'key.asc': 1 key imported: {tb.NOWHERE}" in out
        run("keys", "fetch", tb.ONSERVER)
        assert facades[-1].has_public_key(tb.ONSERVER)
        assert facades[-1].keyfinder.searches == [tb.ONSERVER]
    b.set_loglevel("ERROR")
    b._testmode_reset()


def test_main_reports_errors(facades, monkeypatch, capsys):
    import pgpfront
    b._testmode_reset()
    monkeypatch.setattr(sys, 'argv', ["pgpfront", "encrypt", "-r", tb.NOWHERE, "--no-search", "a.txt"])
    with pytest.raises(SystemExit) as excinfo:
        pgpfront.main()
    assert excinfo.value.code == 1
    out, _ = capsys.readouterr()
    assert f"Could not find a public OpenPGP key with fingerprint [{tb.NOWHERE}]" in out
    b._testmode_reset()


def test_main_version(monkeypatch, capsys):
    import pgpfront
    monkeypatch.setattr(sys, 'argv', ["pgpfront", "--version"])
    with pytest.raises(SystemExit) as excinfo:
        pgpfront.main()
    assert excinfo.value.code == 0
    out, _ = capsys.readouterr()
    assert out == "pgpfront 0.4.0\n"
