"""Concurrent search -> filter -> CSV pipeline for MOEX securities.

One task per query is scheduled on a shared thread pool. Each task fetches the
search response, keeps the traded securities, and writes them to
``<output_dir>/<query>.<extension>``. Failures stay inside the task that hit
them; the session only waits for every task to settle before exiting.
"""
