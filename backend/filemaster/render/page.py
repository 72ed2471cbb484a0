from __future__ import annotations

import html
from typing import Any, List, Optional, Sequence
from urllib.parse import urlencode

from ..formatting import breadcrumbs, parent_dir
from ..types import DirEntry, SearchHit

APP_NAME = "FileMaster"

FLASH_COLORS = {"success": "bg-green-600", "error": "bg-red-600"}


def _escape(s: Any) -> str:
    return html.escape(str(s) if s is not None else "", quote=True)


def _href(**params: str) -> str:
    return _escape("?" + urlencode(params))


def _hidden(name: str, value: Any) -> str:
    return f'<input type="hidden" name="{_escape(name)}" value="{_escape(value)}">'


def _flash_block(flash: str, flash_type: str) -> str:
    if not flash:
        return ""
    color = FLASH_COLORS.get(flash_type, "bg-blue-600")
    return f'<div class="p-4 mb-6 rounded-md {color} text-white">{_escape(flash)}</div>'


def _crumbs_block(current_dir: str) -> str:
    parts = []
    for i, c in enumerate(breadcrumbs(current_dir)):
        if i > 0:
            parts.append('<span class="text-gray-500 dark:text-gray-400">/</span>')
        parts.append(
            f'<a href="{_href(dir=c.path)}" class="text-blue-600 dark:text-blue-400 hover:underline">{_escape(c.name)}</a>'
        )
    return f'<nav class="mb-6"><div class="flex space-x-2 text-sm">{"".join(parts)}</div></nav>'


def _search_block(search_term: str, hits: Sequence[SearchHit]) -> str:
    if not search_term:
        return ""
    if not hits:
        body = '<p class="text-red-500 dark:text-red-400">No files found.</p>'
    else:
        rows = []
        for hit in hits:
            rows.append(
                f"""<li>
          <a href="{_href(dir=hit.folder)}" class="text-blue-600 dark:text-blue-400 hover:underline">{_escape(hit.folder)}</a> /
          <a href="{_href(dir=hit.folder, view=hit.path)}" class="text-blue-600 dark:text-blue-400 hover:underline">{_escape(hit.name)}</a>
        </li>"""
            )
        body = f'<p>Files found:</p><ul class="list-disc ml-6">{"".join(rows)}</ul>'
    return f"""
      <div class="mb-6">
        <h2 class="text-lg font-semibold">Search Results</h2>
        {body}
      </div>"""


def _editor_block(current_dir: str, view_path: str, content: Optional[str]) -> str:
    name = view_path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    if content is None:
        body = '<p class="text-red-500 dark:text-red-400">File cannot be opened or does not exist.</p>'
    else:
        body = f"""
        <form method="post" action="/" class="mb-4">
          {_hidden("action", "save_file")}
          {_hidden("dir", current_dir)}
          {_hidden("file", view_path)}
          <textarea name="content" rows="20" class="w-full p-2 bg-gray-200 dark:bg-gray-800 text-gray-900 dark:text-gray-100 rounded-md font-mono">{_escape(content)}</textarea>
          <div class="mt-4">
            <button type="submit" class="p-2 bg-blue-600 rounded-md text-white hover:bg-blue-700">Save</button>
            <a href="{_href(dir=current_dir)}" class="p-2 bg-gray-600 rounded-md text-white hover:bg-gray-700">Back</a>
          </div>
        </form>"""
    return f"""
      <h2 class="text-2xl font-semibold mb-4">Edit File: {_escape(name)}</h2>
      {body}"""


def _delete_form(current_dir: str, entry: DirEntry) -> str:
    action = "delete_dir" if entry.is_dir else "delete_file"
    question = "Delete folder (if empty)?" if entry.is_dir else "Delete file?"
    return f"""<form method="post" action="/" class="inline" onsubmit="return confirm('{question}')">
            {_hidden("action", action)}
            {_hidden("dir", current_dir)}
            {_hidden("target", entry.path)}
            <button type="submit" class="p-2 bg-red-600 rounded-md text-white hover:bg-red-700">Delete</button>
          </form>"""


def _entry_row(current_dir: str, entry: DirEntry) -> str:
    icon = '<span class="folder-icon"></span>' if entry.is_dir else '<span class="file-icon"></span>'
    if entry.is_dir:
        link = f'<a href="{_href(dir=entry.path)}" class="text-blue-600 dark:text-blue-400 hover:underline">{_escape(entry.name)}</a>'
    else:
        link = f'<a href="{_href(dir=current_dir, view=entry.path)}" class="text-blue-600 dark:text-blue-400 hover:underline">{_escape(entry.name)}</a>'
        if entry.preview is not None:
            link += (
                f' <button type="button" data-preview="{_escape(entry.preview)}" onclick="showPreview(this)"'
                ' class="ml-2 text-sm text-gray-500 hover:text-gray-700 dark:hover:text-gray-300">Preview</button>'
            )
    if not entry.contained:
        link += ' <span class="text-xs text-red-500">(link outside base)</span>'
    kind = "Folder" if entry.is_dir else "File"
    controls = ""
    if entry.contained:
        controls = f"""
          {_delete_form(current_dir, entry)}
          <button type="button" data-path="{_escape(entry.path)}" data-name="{_escape(entry.name)}" onclick="showRenameForm(this)" class="p-2 bg-yellow-600 rounded-md text-white hover:bg-yellow-700">Rename</button>"""
    return f"""
        <tr class="hover:bg-gray-100 dark:hover:bg-gray-700">
          <td class="p-3">{icon}{link}</td>
          <td class="p-3">{kind}</td>
          <td class="p-3">{_escape(entry.size_text)}</td>
          <td class="p-3">{controls}
          </td>
        </tr>"""


def _listing_block(current_dir: str, entries: Sequence[DirEntry]) -> str:
    rows: List[str] = []
    if current_dir != ".":
        rows.append(
            f"""
        <tr>
          <td colspan="4" class="p-3"><a href="{_href(dir=parent_dir(current_dir))}" class="text-blue-600 dark:text-blue-400 hover:underline">&larr; Parent Directory</a></td>
        </tr>"""
        )
    rows.extend(_entry_row(current_dir, e) for e in entries)
    return f"""
      <h2 class="text-2xl font-semibold mb-4">Directory: {_escape(current_dir)}</h2>
      <div class="overflow-x-auto">
        <table class="w-full border-collapse bg-white dark:bg-gray-800 rounded-md shadow">
          <thead>
            <tr class="bg-gray-200 dark:bg-gray-700">
              <th class="p-3 text-left">Name</th>
              <th class="p-3 text-left">Type</th>
              <th class="p-3 text-left">Size</th>
              <th class="p-3 text-left">Actions</th>
            </tr>
          </thead>
          <tbody>{"".join(rows)}
          </tbody>
        </table>
      </div>
      {_forms_block(current_dir)}"""


def _card(title: str, body: str, multipart: bool = False) -> str:
    enctype = ' enctype="multipart/form-data"' if multipart else ""
    return f"""
        <div class="bg-white dark:bg-gray-800 p-6 rounded-md shadow">
          <h3 class="text-lg font-semibold mb-4">{title}</h3>
          <form method="post" action="/"{enctype}>
            {body}
          </form>
        </div>"""


def _forms_block(current_dir: str) -> str:
    field = "w-full p-2 bg-gray-200 dark:bg-gray-700 text-gray-900 dark:text-gray-100 rounded-md"
    button = "mt-4 p-2 bg-blue-600 rounded-md text-white hover:bg-blue-700"
    d = _hidden("dir", current_dir)
    create_file = f"""{_hidden("action", "create_file")}{d}
            <label class="block mb-2 font-medium">File Name:</label>
            <input type="text" name="filename" required class="{field}">
            <label class="block mb-2 mt-4 font-medium">Content:</label>
            <textarea name="content" rows="5" class="{field} font-mono"></textarea>
            <button type="submit" class="{button}">Create</button>"""
    create_dir = f"""{_hidden("action", "create_dir")}{d}
            <label class="block mb-2 font-medium">Folder Name:</label>
            <input type="text" name="dirname" required class="{field}">
            <button type="submit" class="{button}">Create</button>"""
    fetch = f"""{_hidden("action", "fetch_remote")}{d}
            <label class="block mb-2 font-medium">URL:</label>
            <input type="url" name="url" placeholder="https://example.com/file.txt" required class="{field}">
            <button type="submit" class="{button}">Fetch</button>"""
    upload = f"""{_hidden("action", "upload")}{d}
            <input type="file" name="upload" required class="{field}">
            <button type="submit" class="{button}">Upload</button>"""
    return f"""
      <div class="mt-6 grid grid-cols-1 md:grid-cols-2 gap-6">
        {_card("Create New File", create_file)}
        {_card("Create New Folder", create_dir)}
        {_card("Fetch Remote File", fetch)}
        {_card("Upload File", upload, multipart=True)}
      </div>

      <div id="renameFormContainer" class="hidden mt-6 bg-white dark:bg-gray-800 p-6 rounded-md shadow">
        <form method="post" action="/" id="renameForm">
          {_hidden("action", "rename")}{d}
          <input type="hidden" name="old" id="renameOld">
          <label for="renameNew" class="block mb-2 font-medium">New Name:</label>
          <input type="text" name="new" id="renameNew" required class="{field}">
          <div class="mt-4 flex space-x-4">
            <button type="submit" class="p-2 bg-blue-600 rounded-md text-white hover:bg-blue-700">Save</button>
            <button type="button" onclick="hideRenameForm()" class="p-2 bg-gray-600 rounded-md text-white hover:bg-gray-700">Cancel</button>
          </div>
        </form>
      </div>

      <div id="previewModal" class="hidden fixed inset-0 bg-black bg-opacity-50 flex items-center justify-center">
        <div class="bg-white dark:bg-gray-800 p-6 rounded-md max-w-lg w-full">
          <h3 class="text-lg font-semibold mb-4">File Preview</h3>
          <pre id="previewContent" class="file-preview bg-gray-200 dark:bg-gray-700 p-4 rounded-md"></pre>
          <button type="button" onclick="hidePreview()" class="mt-4 p-2 bg-gray-600 rounded-md text-white hover:bg-gray-700">Close</button>
        </div>
      </div>"""


_SCRIPT = """
  <script>
    function showRenameForm(btn) {
      document.getElementById('renameOld').value = btn.dataset.path;
      document.getElementById('renameNew').value = btn.dataset.name;
      document.getElementById('renameFormContainer').classList.remove('hidden');
      document.getElementById('renameNew').focus();
    }
    function hideRenameForm() {
      document.getElementById('renameFormContainer').classList.add('hidden');
    }
    function showPreview(btn) {
      document.getElementById('previewContent').textContent = btn.dataset.preview;
      document.getElementById('previewModal').classList.remove('hidden');
    }
    function hidePreview() {
      document.getElementById('previewModal').classList.add('hidden');
    }
    document.getElementById('darkModeToggle').addEventListener('click', () => {
      document.documentElement.classList.toggle('dark');
      localStorage.setItem('darkMode', document.documentElement.classList.contains('dark'));
    });
    if (localStorage.getItem('darkMode') === 'true') {
      document.documentElement.classList.add('dark');
    }
  </script>"""


def render_page(
    *,
    current_dir: str,
    entries: Sequence[DirEntry] = (),
    flash: str = "",
    flash_type: str = "info",
    search_term: str = "",
    search_hits: Sequence[SearchHit] = (),
    view_path: Optional[str] = None,
    view_content: Optional[str] = None,
) -> str:
    """Full HTML page: header, flash, breadcrumbs, then either the editor or the listing."""
    if view_path is not None:
        main = _editor_block(current_dir, view_path, view_content)
    else:
        main = _listing_block(current_dir, entries)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{APP_NAME}</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <style>
    .file-preview {{ max-height: 200px; overflow-y: auto; white-space: pre-wrap; }}
    .folder-icon::before {{ content: "\\1F4C1 "; }}
    .file-icon::before {{ content: "\\1F4C4 "; }}
  </style>
</head>
<body class="bg-gray-100 dark:bg-gray-900 text-gray-900 dark:text-gray-100 min-h-screen transition-colors duration-300">
  <header class="bg-gray-800 dark:bg-gray-950 p-4 flex justify-between items-center">
    <h1 class="text-xl font-bold text-white"><a href="/">{APP_NAME}</a></h1>
    <div class="flex items-center space-x-4">
      <form method="get" action="/" class="flex items-center">
        {_hidden("dir", current_dir)}
        <input type="text" name="search" placeholder="Search files..." value="{_escape(search_term)}" required class="p-2 rounded-l-md bg-gray-700 text-white border-none focus:outline-none focus:ring-2 focus:ring-blue-500">
        <button type="submit" class="p-2 bg-blue-600 rounded-r-md text-white hover:bg-blue-700">Search</button>
      </form>
      <button type="button" id="darkModeToggle" class="p-2 bg-gray-700 rounded-md text-white hover:bg-gray-600">Toggle Dark Mode</button>
    </div>
  </header>

  <main class="container mx-auto p-6">
    {_flash_block(flash, flash_type)}
    {_crumbs_block(current_dir)}
    {_search_block(search_term, search_hits)}
    {main}
  </main>
{_SCRIPT}
</body>
</html>"""
