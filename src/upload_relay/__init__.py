"""Relay uploaded files to an object store and record each upload in a shared spreadsheet ledger."""
