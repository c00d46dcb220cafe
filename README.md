# codetect

A library for splitting source files into chunks and turning those chunks
into embedding vectors. The vectors come from a local Ollama server or from any
OpenAI-compatible endpoint, such as a LiteLLM proxy. The library keeps the
vectors in SQLite and searches them by meaning.

## Install

From a checkout of the package:

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Chunking (`codetect.chunker`)

```python
from codetect.chunker import ChunkerConfig, Symbol, chunk_file

config = ChunkerConfig()  # 30 lines per chunk, 15 lines overlap
symbols = [Symbol(name="main", kind="function", line=3)]
for chunk in chunk_file("main.go", symbols, config):
    print(chunk.path, chunk.start_line, chunk.end_line, chunk.kind)
```

- `Chunk` holds `path`, `start_line`, `end_line` (1-based, inclusive), `content`
  and `kind`.
- Only symbols of kind `function`, `method`, `type`, `struct`, `class` or
  `interface` mark chunk boundaries.
- Each symbol's chunk runs up to the line before the next symbol.
- A symbol range shorter than five lines is not chunked on its own.
- A symbol range longer than `max_chunk_lines` is split into overlapping pieces
  that keep the symbol's kind.
- Lines not covered by a symbol chunk, and whole files given no symbols, are cut
  into overlapping windows of kind `"fixed"`.
- In those windows, pieces shorter than five lines are dropped. A stretch too
  short for any window becomes one chunk.

`chunk_file_simple(path, config)` always uses fixed windows. The lower-level
functions `chunk_by_lines`, `chunk_by_symbols`, `split_large_chunk`,
`create_chunk` and `filter_relevant_symbols` are public as well.

## Embedding providers

All providers implement `codetect.embedder.Embedder`, which has four methods:

- `embed(texts)`
- `available()`
- `provider_id()`
- `dimensions()`

When a provider fails, it raises `codetect.embedder.EmbeddingError`.

- `codetect.ollama.OllamaClient(base_url, model, timeout)`: sends one request
  per text to `/api/embeddings`.
  - `model_available()` checks that the model is installed on the server.
  - `dimensions()` knows `nomic-embed-text` (768), `mxbai-embed-large` (1024)
    and `all-minilm` (384). Any other model reports 768.
- `codetect.litellm.LiteLLMClient(base_url, api_key, model, dimensions, timeout)`:
  sends all texts in one request to `/v1/embeddings`.
  - Results are put back in input order.
  - `available()` accepts a 200 or a 401 from `/health`.
- `codetect.embedder.NullEmbedder`: returns no vectors and is never available.

`codetect.provider` builds a provider from `CODETECT_*` environment variables,
or from any mapping you pass as `environ`:

| Variable | Meaning |
| --- | --- |
| `CODETECT_EMBEDDING_PROVIDER` | `ollama` (default), `litellm`, or `off` / `disabled` / `none`; an unknown value prints a warning and keeps `ollama` |
| `CODETECT_OLLAMA_URL` | Ollama server, default `http://localhost:11434` |
| `CODETECT_LITELLM_URL` | OpenAI-compatible server, default `http://localhost:4000` |
| `CODETECT_LITELLM_API_KEY` | Bearer key sent to that server |
| `CODETECT_EMBEDDING_MODEL` | Model name; each provider has its own default |
| `CODETECT_EMBEDDING_DIMENSIONS` | Positive vector size for LiteLLM models; other values are ignored |

```python
from codetect.provider import new_embedder_from_env

embedder = new_embedder_from_env({"CODETECT_EMBEDDING_PROVIDER": "litellm",
                                  "CODETECT_LITELLM_API_KEY": "placeholder"})
print(embedder.provider_id())  # litellm:text-embedding-3-small
```

If you build the configuration yourself, use `load_config_from_env`,
`ProviderConfig` and `new_embedder`. `Provider` is an enum. `str()` of a
`Provider` gives its display name, and `is_enabled()` tells whether it is
switched on.

## Storing and searching

```python
from codetect.store import EmbeddingStore
from codetect.search import SemanticSearcher

with EmbeddingStore("index.db", "/path/to/repo") as store:
    searcher = SemanticSearcher(store, embedder)
    stored = searcher.index_chunks(chunks, progress=lambda done, total: print(done, total))
    result = searcher.search("open a database connection", limit=5)
    for hit in result.results:
        print(f"{hit.score:.3f} {hit.path}:{hit.start_line}-{hit.end_line}")
```

### `EmbeddingStore`

- Takes a file path, `":memory:"`, or an open `sqlite3.Connection`. It does not
  close a connection that you pass in.
- Each store sees only the rows of its own repository root, so several
  repositories can share one database.
- Methods:
  - `save`, `save_batch`
  - `get_by_path`, `get_all`
  - `has_embedding`
  - `delete_by_path`, `delete_all`
  - `count`, `stats`
- Content is identified by `hash_content`, the SHA-256 of the chunk text.

### `SemanticSearcher`

- `index_chunks` embeds only the chunks not already stored with the same
  content and provider. Chunks that fail to embed are skipped and counted on
  stderr. It returns the number of chunks stored.
- `search` ranks stored vectors by cosine similarity and drops results that
  score zero or less. It returns a `SemanticSearchResult` with `available`,
  `results` and `error`. `to_dict()` gives a JSON-ready form.
- Without a provider, or with no embeddings stored, `search` sets `error`
  instead of raising.
- Result snippets are placeholders such as `[path:1-30] (30 lines)`. To get
  real text, use `search_with_snippets(query, limit, snippet_fn)`, which cuts
  each snippet at 500 characters.

`truncate_snippet(s, max_len)` shortens text at a line break where it can.

The vector helpers in `codetect.vectors` are:

- `cosine_similarity`
- `dot_product`
- `magnitude`
- `normalize`
- `euclidean_distance`
- `top_k_by_cosine_similarity`

## Moving an index

```python
import threading
from codetect.migration import MigrationOptions, migrate_database, validate_migration

stop = threading.Event()
progress = migrate_database(source_store, target_store, MigrationOptions(batch_size=500),
                            callback=print, cancel=stop)
validate_migration(source_store, target_store, 10)
```

### `migrate_database`

- Copies in batches, skipping entries the target already has, unless
  `skip_existing=False`.
- `drop_target=True` clears the target first.
- `dry_run=True` only counts.
- `callback` receives a `MigrationProgress` after each batch.
- Setting the `cancel` event raises `MigrationCancelled` after the current
  batch.

### `validate_migration`

- Compares the counts of the two stores.
- Checks a sample of the embeddings, comparing the first ten values of each.
- Raises `MigrationError` on the first difference it finds.

## What this package does not do

- It has no command-line tool and no server.
- It does not walk or watch a repository, and it does not extract symbols from
  source code. You supply the `Symbol` list yourself.
- Storage is SQLite only. Vectors are stored as JSON text and searched in
  memory, with no database-side vector index.