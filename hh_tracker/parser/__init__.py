"""Parsing of hh.ru "responses" pastes.

Modules:
- segmenter: split a paste into status-terminated blocks
- fields: pick title, company and date out of a block
- classifier: role family and grade heuristics
- pipeline: ``ingest`` ties the steps together and drops repeats
"""
