import io

import pytest

from ldadmm.corpus import build_corpus

SHORT_DOCS = ['a a b', 'b c', 'a c c']

NEWS_DOCS = [
    'stock market shares fell trading',
    'market shares rose stock investors',
    'football match goal team win',
    'team coach football season goal',
    'stock investors trading market',
    'match season team win coach',
]


def write_lines(path, lines):
    with io.open(str(path), 'w', encoding='utf-8') as f:
        for line in lines:
            f.write(line + '\n')
    return str(path)


@pytest.fixture
def short_corpus():
    return build_corpus(SHORT_DOCS)


@pytest.fixture
def news_corpus():
    return build_corpus(NEWS_DOCS)


@pytest.fixture
def news_path(tmp_path):
    return write_lines(tmp_path / 'news.txt', NEWS_DOCS)
