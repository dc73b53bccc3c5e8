# dbgen

Building blocks for producing random database content and writing it out as
SQL or CSV.

The package has these modules:

- **`dbgen.bytestring`**: `ByteString` is a byte buffer that tracks whether
  its content is pure ASCII, valid UTF-8 or arbitrary binary (`Encoding`). It
  supports appending (`extend_str`, `extend_bytes`, `extend_byte_string`,
  `extend_number`, `write`), `truncate`, `drain_init`, `splice`, `clear`, and
  converting character ranges to byte ranges (`char_range`). `to_str` raises
  `TryIntoStringError` when the content is not UTF-8.
- **`dbgen.formatting`**: the value writers `SqlFormat`, `CsvFormat` and
  `SqlInsertSetFormat`, configured through `Options`. The module also provides
  `Schema`, `Interval`, the escape rules `Escape` and `Unescape`, and the
  helpers `write_with_escape`, `write_timestamp` and `write_interval`.
- **`dbgen.names`**: the named choices used when configuring a run:
  `Seed`, `RngName`, `FormatName`, `CompressionName` and `ComponentName`.
  `CompressionName.wrap` wraps a binary writer in gzip, xz or Zstandard
  compression.
- **`dbgen.rows`**: `Args` and `RowArgs`. `Args.row_args()` splits a requested
  number of rows into files, INSERT statements and rows per statement.
  `Args.to_dict()` and `Args.from_dict()` convert the arguments to and from
  plain mappings. `parse_size` and `parse_row_count` read numbers with
  size suffixes.
- **`dbgen.argspec`**: `App`, `Arg` and `ArgType` describe a small command-line
  interface as data. `App.get_matches` parses an argument list against that
  description, and `ensure_seed` adds a random seed to the parsed values.
- **`dbgen.errors`**: the exception hierarchy rooted at `DbgenError`, plus
  `Purpose`.

## Byte strings

```python
from dbgen.bytestring import ByteString

s = ByteString(b"abc")
s.extend_bytes(b"\xc2")
s.encoding()        # Encoding.BINARY: a lone lead byte is not valid UTF-8
s.extend_bytes(b"\x80")
s.encoding()        # Encoding.UTF8
bytes(s)            # b"abc\xc2\x80"
s.char_len()        # 4
```

## Writing values

`SqlFormat`, `CsvFormat` and `SqlInsertSetFormat` take an `Options` instance.
They write to any binary file-like object. Values can be `None`, booleans,
integers, floats, `str`/`bytes`/`ByteString`, `datetime.datetime`,
`Interval` or `datetime.timedelta`, and lists or tuples of these.

```python
import io
from dbgen.formatting import Options, SqlFormat, write_interval

out = io.BytesIO()
fmt = SqlFormat(Options())
fmt.write_value(out, "it's")
fmt.write_value_separator(out)
fmt.write_value(out, None)
out.getvalue()      # b"'it''s', NULL"

buf = io.BytesIO()
write_interval(buf, "'", 90_061_000_001)
buf.getvalue()      # b"'1 01:01:01.000001'"
```

## Splitting rows into files

```python
from dbgen.rows import Args

args = Args(total_count=199_909, rows_per_file=18_013, rows_count=97)
plan = args.row_args()
plan.files_count                        # 12
plan.last_file_inserts_count            # 19
plan.last_file_final_insert_rows_count  # 20
```

## Names and seeds

```python
from dbgen.names import ComponentName, FormatName, Seed

FormatName.parse("csv").default_null_string()   # "\\N"
mask = ComponentName.union_all([ComponentName.parse("table"), ComponentName.parse("data")])
ComponentName.parse("schema").is_in(mask)        # False

seed = Seed.parse("00" * 32)
str(seed)                                        # 64 lowercase hex digits
```

Unknown names raise `UnsupportedCliParameterError`.

## Describing a command line as data

```python
from dbgen.argspec import App, ensure_seed

app = App.from_dict({
    "name": "demo",
    "args": {
        "rows": {"short": "r", "type": "int", "default": "10"},
        "verbose": {"type": "bool"},
    },
})
matches = app.get_matches(["--rows", "25"])   # {"rows": 25, "verbose": False}
ensure_seed(matches)   # adds a random 64-digit hex "seed" if none was given
```

Invalid input makes `get_matches` print a message and raise `SystemExit`.

## What the package does not do

The package has no template language. It cannot parse `CREATE TABLE`
templates, evaluate column expressions or generate random values. The
random number generator engines appear only as names in `RngName`. The
package has no command-line program, and nothing in it writes data or schema
files to an output directory. It provides the pieces such a tool would use:
value formatting, row partitioning, compression wrappers and argument
handling.