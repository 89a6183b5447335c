"""
Search indexing and query engine package.

This package provides a pure-Python offline search stack:
- models: Inverted index data model (terms, postings, articles)
- index_loader: JSON index loading and validation
- analyzers: Tokenizer pipeline (lowercase, word split, length filter)
- query_parser: Phrase, exclusion and field-boost operator extraction
- phrase: Contiguous position matching
- stats: TF-IDF and BM25 scoring statistics
- retrieval: Term postings lookup and phrase verification
- ranking_engine: TF-IDF scoring with field weights and result merging
- snippet: Excerpts and term highlighting
- fuzzy: Edit-distance and prefix term expansion
- mini_engine: Lightweight fuzzy/prefix engine over raw documents
"""
