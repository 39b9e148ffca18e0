from __future__ import annotations

from html import escape


def render_homepage(app_name: str = "taskboard") -> str:
    return _PAGE.replace("__APP_NAME__", escape(app_name))


_PAGE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>__APP_NAME__ · Task Board</title>
  <link rel="preconnect" href="https://fonts.googleapis.com">
  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
  <link
    href="https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;500;700&display=swap"
    rel="stylesheet"
  >
  <link
    href="https://fonts.googleapis.com/css2?family=IBM+Plex+Mono:wght@400;500&display=swap"
    rel="stylesheet"
  >
  <style>
    :root {
      --bg: #f3efe6;
      --panel: #fffaf0;
      --ink: #112433;
      --muted: #5c6b74;
      --accent: #0f8b8d;
      --accent-strong: #136f63;
      --line: #d7d1c3;
      --warn: #b00020;
      --done: #2e7d32;
      --todo: #c46a00;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      min-height: 100vh;
      font-family: "Space Grotesk", sans-serif;
      color: var(--ink);
      background:
        radial-gradient(circle at 10% 10%, #b6e3df 0%, transparent 45%),
        radial-gradient(circle at 90% 85%, #ffd3a8 0%, transparent 42%),
        var(--bg);
    }
    .wrap {
      max-width: 900px;
      margin: 24px auto;
      padding: 0 16px 24px;
      display: grid;
      gap: 16px;
    }
    .hero, .card {
      background: color-mix(in srgb, var(--panel) 88%, white 12%);
      border: 1px solid var(--line);
      border-radius: 16px;
      box-shadow: 0 8px 22px rgba(17, 36, 51, 0.08);
    }
    .hero {
      padding: 20px;
      display: flex;
      flex-wrap: wrap;
      align-items: center;
      justify-content: space-between;
      gap: 10px;
    }
    .title {
      margin: 0;
      font-size: clamp(1.3rem, 2.5vw, 2rem);
      line-height: 1.1;
    }
    .sub { margin: 6px 0 0; color: var(--muted); }
    .stats { display: flex; gap: 8px; flex-wrap: wrap; }
    .pill {
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.78rem;
      border: 1px solid var(--line);
      border-radius: 999px;
      padding: 6px 10px;
      background: #fff;
    }
    .pill.completed { color: var(--done); }
    .pill.pending { color: var(--todo); }
    .card { padding: 16px; }
    label {
      display: block;
      margin-bottom: 6px;
      font-weight: 700;
      font-size: 0.92rem;
    }
    textarea, input, select {
      width: 100%;
      border: 1px solid var(--line);
      border-radius: 12px;
      padding: 10px 12px;
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.9rem;
      background: #fff;
      color: var(--ink);
    }
    textarea { min-height: 80px; resize: vertical; }
    .field { margin-bottom: 12px; }
    .row { display: flex; gap: 10px; flex-wrap: wrap; align-items: center; }
    .toolbar { justify-content: space-between; }
    .toolbar select { width: auto; }
    button {
      border: none;
      border-radius: 10px;
      padding: 10px 14px;
      font-family: "Space Grotesk", sans-serif;
      font-weight: 700;
      cursor: pointer;
      transition: transform 120ms ease, opacity 120ms ease;
    }
    button:hover { transform: translateY(-1px); }
    button:active { transform: translateY(0); }
    button:disabled, select:disabled, input:disabled { opacity: 0.55; cursor: wait; }
    .primary { background: var(--accent); color: #fff; }
    .secondary { background: #edf6f5; color: var(--accent-strong); }
    .danger { background: #ffe8ec; color: var(--warn); }
    .status {
      margin: 0;
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.9rem;
    }
    .error { color: var(--warn); }
    .tasks { list-style: none; margin: 0; padding: 0; display: grid; gap: 10px; }
    .task {
      display: grid;
      grid-template-columns: auto 1fr auto;
      gap: 12px;
      align-items: start;
      border: 1px solid var(--line);
      border-radius: 12px;
      padding: 12px;
      background: #fff;
    }
    .task input[type="checkbox"] { width: 20px; height: 20px; margin-top: 3px; }
    .task h3 { margin: 0; font-size: 1.02rem; }
    .task.is-completed h3 { text-decoration: line-through; color: var(--muted); }
    .task p { margin: 4px 0 0; color: var(--muted); white-space: pre-wrap; }
    .meta {
      margin-top: 6px;
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.75rem;
      color: var(--muted);
    }
    .empty { text-align: center; color: var(--muted); padding: 24px 0; }
    dialog {
      border: 1px solid var(--line);
      border-radius: 16px;
      padding: 18px;
      width: min(480px, 92vw);
      background: var(--panel);
      color: var(--ink);
    }
    dialog::backdrop { background: rgba(17, 36, 51, 0.35); }
  </style>
</head>
<body>
  <main class="wrap">
    <section class="hero">
      <div>
        <h1 class="title">__APP_NAME__</h1>
        <p class="sub">Create, filter, complete and clean up your tasks.</p>
      </div>
      <div class="stats">
        <span class="pill" id="statTotal">0 total</span>
        <span class="pill completed" id="statCompleted">0 completed (0%)</span>
        <span class="pill pending" id="statPending">0 pending</span>
      </div>
    </section>

    <section class="card">
      <form id="createForm">
        <div class="field">
          <label for="titleInput">Title *</label>
          <input id="titleInput" maxlength="200" placeholder="Enter task title..." required>
        </div>
        <div class="field">
          <label for="descriptionInput">Description</label>
          <textarea id="descriptionInput" placeholder="Optional details..."></textarea>
        </div>
        <div class="row">
          <button class="primary" type="submit" id="createBtn">Add Task</button>
        </div>
      </form>
    </section>

    <section class="card">
      <div class="row toolbar">
        <p class="status" id="statusText">Ready.</p>
        <select id="filterSelect" aria-label="Filter tasks">
          <option value="all">All tasks</option>
          <option value="pending">Pending</option>
          <option value="completed">Completed</option>
        </select>
      </div>
      <ul class="tasks" id="taskList"></ul>
      <p class="empty" id="emptyState" hidden></p>
    </section>
  </main>

  <dialog id="editDialog">
    <form id="editForm" method="dialog">
      <div class="field">
        <label for="editTitle">Title *</label>
        <input id="editTitle" maxlength="200" required>
      </div>
      <div class="field">
        <label for="editDescription">Description</label>
        <textarea id="editDescription"></textarea>
      </div>
      <div class="field">
        <label for="editStatus">Status</label>
        <select id="editStatus">
          <option value="pending">Pending</option>
          <option value="completed">Completed</option>
        </select>
      </div>
      <div class="row">
        <button class="primary" type="submit" id="saveBtn">Save</button>
        <button class="secondary" type="button" id="cancelBtn">Cancel</button>
      </div>
    </form>
  </dialog>

  <script>
    const EMPTY_MESSAGES = {
      all: "No tasks yet. Add your first task above.",
      pending: "No pending tasks. Everything is done!",
      completed: "No completed tasks yet.",
    };

    const titleInput = document.getElementById("titleInput");
    const descriptionInput = document.getElementById("descriptionInput");
    const filterSelect = document.getElementById("filterSelect");
    const statusText = document.getElementById("statusText");
    const taskList = document.getElementById("taskList");
    const emptyState = document.getElementById("emptyState");
    const editDialog = document.getElementById("editDialog");
    const editTitle = document.getElementById("editTitle");
    const editDescription = document.getElementById("editDescription");
    const editStatus = document.getElementById("editStatus");

    let tasks = [];
    let filter = "all";
    let editingId = null;

    function setStatus(message, isError = false) {
      statusText.textContent = message;
      statusText.classList.toggle("error", isError);
    }

    // One mutating request at a time: controls stay disabled until it settles.
    function setBusy(busy) {
      document.querySelectorAll("button, select, input, textarea").forEach((el) => {
        el.disabled = busy;
      });
    }

    function formatError(data) {
      if (data && typeof data.detail === "string") {
        return data.detail;
      }
      return JSON.stringify(data && data.detail ? data.detail : data);
    }

    async function sendJson(url, method, body) {
      const options = { method, headers: { "Content-Type": "application/json" } };
      if (body !== undefined) {
        options.body = JSON.stringify(body);
      }
      const response = await fetch(url, options);
      const data = await response.json();
      if (!response.ok) {
        throw new Error(formatError(data));
      }
      return data;
    }

    async function run(label, action) {
      try {
        setBusy(true);
        setStatus(label);
        await action();
        setStatus("Ready.");
      } catch (err) {
        setStatus(String(err.message || err), true);
      } finally {
        setBusy(false);
        render();
      }
    }

    function replaceTask(updated) {
      tasks = tasks.map((task) => (task.id === updated.id ? updated : task));
    }

    function renderStats() {
      const total = tasks.length;
      const completed = tasks.filter((task) => task.status === "completed").length;
      const pending = tasks.filter((task) => task.status === "pending").length;
      const percent = total > 0 ? Math.round((completed / total) * 100) : 0;
      document.getElementById("statTotal").textContent = `${total} total`;
      document.getElementById("statCompleted").textContent =
        `${completed} completed (${percent}%)`;
      document.getElementById("statPending").textContent = `${pending} pending`;
    }

    function renderTask(task) {
      const item = document.createElement("li");
      item.className = `task is-${task.status}`;

      const toggle = document.createElement("input");
      toggle.type = "checkbox";
      toggle.checked = task.status === "completed";
      toggle.title = "Toggle completed";
      toggle.addEventListener("change", () => toggleStatus(task));

      const body = document.createElement("div");
      const heading = document.createElement("h3");
      heading.textContent = task.title;
      body.appendChild(heading);
      if (task.description) {
        const description = document.createElement("p");
        description.textContent = task.description;
        body.appendChild(description);
      }
      const meta = document.createElement("div");
      meta.className = "meta";
      meta.textContent =
        `#${task.id} · ${task.status} · created ${new Date(task.created_at).toLocaleString()}`;
      body.appendChild(meta);

      const actions = document.createElement("div");
      actions.className = "row";
      const editBtn = document.createElement("button");
      editBtn.className = "secondary";
      editBtn.textContent = "Edit";
      editBtn.addEventListener("click", () => openEdit(task));
      const deleteBtn = document.createElement("button");
      deleteBtn.className = "danger";
      deleteBtn.textContent = "Delete";
      deleteBtn.addEventListener("click", () => deleteTask(task));
      actions.append(editBtn, deleteBtn);

      item.append(toggle, body, actions);
      return item;
    }

    function render() {
      renderStats();
      const visible = tasks.filter((task) => filter === "all" || task.status === filter);
      taskList.replaceChildren(...visible.map(renderTask));
      emptyState.hidden = visible.length > 0;
      emptyState.textContent = EMPTY_MESSAGES[filter];
    }

    function loadTasks() {
      const url = filter === "all" ? "/tasks" : `/tasks?status=${encodeURIComponent(filter)}`;
      return run("Loading tasks...", async () => {
        tasks = await sendJson(url, "GET");
      });
    }

    function toggleStatus(task) {
      const next = task.status === "pending" ? "completed" : "pending";
      return run("Updating status...", async () => {
        replaceTask(await sendJson(`/tasks/${task.id}/status`, "PATCH", { status: next }));
      });
    }

    function deleteTask(task) {
      if (!window.confirm(`Delete "${task.title}"?`)) {
        return;
      }
      return run("Deleting task...", async () => {
        await sendJson(`/tasks/${task.id}`, "DELETE");
        tasks = tasks.filter((item) => item.id !== task.id);
      });
    }

    function openEdit(task) {
      editingId = task.id;
      editTitle.value = task.title;
      editDescription.value = task.description || "";
      editStatus.value = task.status;
      editDialog.showModal();
    }

    document.getElementById("createForm").addEventListener("submit", (event) => {
      event.preventDefault();
      const title = titleInput.value.trim();
      if (!title) {
        setStatus("Title is required.", true);
        return;
      }
      const payload = { title, description: descriptionInput.value.trim() || null };
      run("Creating task...", async () => {
        const created = await sendJson("/tasks", "POST", payload);
        tasks = [created, ...tasks];
        titleInput.value = "";
        descriptionInput.value = "";
      });
    });

    document.getElementById("editForm").addEventListener("submit", (event) => {
      event.preventDefault();
      const title = editTitle.value.trim();
      if (!title || editingId === null) {
        return;
      }
      const payload = {
        title,
        description: editDescription.value.trim() || null,
        status: editStatus.value,
      };
      const taskId = editingId;
      run("Saving task...", async () => {
        replaceTask(await sendJson(`/tasks/${taskId}`, "PATCH", payload));
        editDialog.close();
        editingId = null;
      });
    });

    document.getElementById("cancelBtn").addEventListener("click", () => {
      editDialog.close();
      editingId = null;
    });

    filterSelect.addEventListener("change", () => {
      filter = filterSelect.value;
      loadTasks();
    });

    loadTasks();
  </script>
</body>
</html>
"""
