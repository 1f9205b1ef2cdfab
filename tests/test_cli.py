import json

import pytest

from conftest import FakeResponse
from swidtag import cli


def run(*argv):
    with pytest.raises(SystemExit) as exc:
        cli.main([str(a) for a in argv])
    return exc.value.code


def test_convert_xml_to_json_file(samples, config_file, tmp_path, capsys):
    out = tmp_path / 'feed.swidtag.json'
    assert run('convert', samples / 'swid.feed.xml', '-f', 'json', '-o', out, '--config', config_file) == 0
    data = json.loads(out.read_text(encoding='utf-8'))
    assert data['name'] == 'SampleFeed'
    assert set(data['Link']) == {
        'http://example.com/packages/feed.swidtag',
        'http://example.com/packages/sample-1.0.msi',
    }
    assert '[OK] JSON saved to:' in capsys.readouterr().out


def test_convert_to_stdout(samples, config_file, capsys):
    assert run('convert', samples / 'SimpleTag.json', '--config', config_file) == 0
    out = capsys.readouterr().out
    assert out.startswith('<?xml version="1.0" encoding="utf-8"?>')
    assert '  name="SimpleTag"' in out.splitlines()


def test_existing_output_needs_overwrite(samples, config_file, tmp_path, capsys):
    out = tmp_path / 'feed.swidtag'
    out.write_text('old', encoding='utf-8')
    assert run('convert', samples / 'swid.feed.xml', '-o', out, '--config', config_file) == 3
    assert out.read_text(encoding='utf-8') == 'old'
    assert 'already exists' in capsys.readouterr().err

    assert run('convert', samples / 'swid.feed.xml', '-o', out, '--overwrite', '--config', config_file) == 0
    assert out.read_text(encoding='utf-8').startswith('<?xml')


def test_output_dir_names_the_file(samples, config_file, tmp_path):
    out_dir = tmp_path / 'out'
    assert run('convert', samples / 'swid.feed.xml', '--output-dir', out_dir, '--config', config_file) == 0
    assert len(list(out_dir.glob('sample-feed-1.0_*.swidtag'))) == 1


def test_html_input_reports_diagnostics(samples, config_file, capsys):
    assert run('convert', samples / 'SimpleTags.html', '--config', config_file) == 0
    captured = capsys.readouterr()
    assert 'href="http://example.com/feeds/main.swidtag"' in captured.out
    assert '[cli] WARN: unresolvable-link [style.css]' in captured.err


def test_quiet_suppresses_warnings(samples, config_file, capsys):
    assert run('convert', samples / 'SimpleTags.html', '-q', '--config', config_file) == 0
    assert 'WARN' not in capsys.readouterr().err


def test_wrong_root_fails_to_load(config_file, tmp_path, capsys):
    bad = tmp_path / 'bad.xml'
    bad.write_text('<Foo/>', encoding='utf-8')
    assert run('convert', bad, '--config', config_file) == 1
    assert 'schema-mismatch' in capsys.readouterr().err


def test_missing_input(config_file, tmp_path, capsys):
    assert run('convert', tmp_path / 'missing.xml', '--config', config_file) == 1
    assert 'fetch-failure' in capsys.readouterr().err


def test_missing_config_file(samples, tmp_path, capsys):
    assert run('convert', samples / 'swid.feed.xml', '--config', tmp_path / 'nope.yaml') == 2
    assert 'config file not found' in capsys.readouterr().err


def test_url_input(config_file, monkeypatch, capsys):
    page = '<html><head><link rel="feed" href="feed.swidtag"></head></html>'
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        return FakeResponse(text=page, url='http://example.com/dir/index.html',
                            headers={'Content-Type': 'text/html; charset=utf-8'})

    monkeypatch.setattr(cli.requests, 'get', fake_get)
    assert run('convert', 'http://example.com/dir/', '--config', config_file) == 0
    assert calls == [('http://example.com/dir/', 5)]
    assert 'href="http://example.com/dir/feed.swidtag"' in capsys.readouterr().out


def test_inspect(samples, config_file, capsys):
    assert run('inspect', samples / 'swid.feed.xml', '--config', config_file) == 0
    lines = capsys.readouterr().out.splitlines()
    assert 'name:           SampleFeed' in lines
    assert 'flags:          corpus' in lines
    assert 'meta:           summary = A sample package feed' in lines
    assert len([line for line in lines if line.startswith('link:')]) == 2


def test_applicable_with_flags(samples, config_file, capsys):
    feed = samples / 'swid.feed.xml'
    assert run('applicable', feed, '-e', 'OS=windows', '-e', 'OSVersion=6.3', '--config', config_file) == 0
    assert capsys.readouterr().out.startswith('applicable:')
    assert run('applicable', feed, '-e', 'OS=linux', '--config', config_file) == 4
    assert capsys.readouterr().out.startswith('not applicable:')


def test_applicable_uses_config_environment(samples, config_file):
    assert run('applicable', samples / 'swid.feed.xml', '--config', config_file) == 0


def test_applicable_rejects_bad_pairs(samples, config_file, capsys):
    assert run('applicable', samples / 'swid.feed.xml', '-e', 'OS', '--config', config_file) == 2
    assert 'expected KEY=VALUE' in capsys.readouterr().err


def test_usage_errors():
    assert run() == 2
    assert run('convert', 'x.xml', '--from', 'yaml') == 2


def test_utf16_xml_input(config_file, tmp_path, capsys):
    wide = tmp_path / 'wide.xml'
    wide.write_bytes((
        '<?xml version="1.0" encoding="utf-16"?>\n'
        '<SoftwareIdentity xmlns="http://standards.iso.org/iso/19770/-2/2015/schema.xsd"'
        ' name="Wide" version="1.0" />'
    ).encode('utf-16'))
    assert run('inspect', wide, '--config', config_file) == 0
    assert 'name:           Wide' in capsys.readouterr().out.splitlines()


def test_undecodable_json_is_a_load_failure(config_file, tmp_path, capsys):
    bad = tmp_path / 'bad.json'
    bad.write_bytes(b'{"name": "\xff\xfe"}')
    assert run('convert', bad, '--config', config_file) == 1
    assert 'parse-failure' in capsys.readouterr().err


def test_bad_config_timeout_falls_back_to_default(tmp_path, monkeypatch, capsys):
    cfg = tmp_path / 'cli.yaml'
    cfg.write_text('timeout: abc\n', encoding='utf-8')
    calls = []

    def fake_get(url, timeout=None):
        calls.append(timeout)
        return FakeResponse(text='<html><head></head></html>', url=url,
                            headers={'Content-Type': 'text/html'})

    monkeypatch.setattr(cli.requests, 'get', fake_get)
    run('convert', 'http://example.com/', '--config', cfg)
    assert calls == [30]
    assert 'timeout must be a positive integer' in capsys.readouterr().err
