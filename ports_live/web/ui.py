HTML = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>Ports</title>
  <style>
    body { background:#14181d; color:#e8eaed; font-family: ui-sans-serif,system-ui,Segoe UI,Arial; padding: 0 24px; }
    table { border-collapse: collapse; margin-bottom: 24px; }
    td, th { padding: 4px 12px; text-align: left; }
    td.port { font-family: ui-monospace,monospace; text-align: right; color:#6aa84f; }
    td.detail { color:#9aa0a6; }
    a { color:#4f9cff; }
    form { margin: 12px 0 24px; }
    input { background:#1d232b; color:#e8eaed; border:1px solid #2a2f36; border-radius:6px; padding:4px 8px; }
  </style>
</head>
<body>
  <h2>Listening Ports</h2>
  <button id="rescan">Rescan</button>
  <table id="ports"></table>

  <h2>Servers</h2>
  <form id="serve">
    <input name="directory" placeholder="/path/to/folder" size="40" required/>
    <input name="port" placeholder="__DEFAULT_PORT__" size="6"/>
    <label><input type="checkbox" name="exposeToLAN" __LAN_CHECKED__/> Allow access from other devices on this LAN</label>
    <button type="submit">Serve</button>
  </form>
  <table id="servers"></table>
  <button id="stop-all">Stop All Servers</button>

  <script>
  const esc = s => String(s).replace(/[&<>"']/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c]));

  async function refreshPorts(force){
    const r = await fetch('/api/ports' + (force ? '?force=1' : ''));
    const ports = await r.json();
    document.getElementById('ports').innerHTML = ports.map(p =>
      `<tr><td class="port">${p.port}</td><td>→ ${esc(p.processName)}</td><td class="detail">(pid ${p.pid}) ${esc(p.address)}</td></tr>`
    ).join('') || '<tr><td>No listening ports</td></tr>';
  }

  async function refreshServers(){
    const r = await fetch('/api/servers');
    const servers = await r.json();
    document.getElementById('servers').innerHTML = servers.map(s =>
      `<tr><td class="port">${s.port}</td><td>→ ${esc(s.name)} (${s.exposeToLAN ? '↔' : '⌂'})</td>
       <td><a href="${esc(s.localURL)}" target="_blank">${esc(s.localURL)}</a></td>
       <td>${s.lanURL ? `<a href="${esc(s.lanURL)}" target="_blank">${esc(s.lanURL)}</a>` : (s.exposeToLAN ? 'LAN URL unavailable' : '')}</td>
       <td><button onclick="stopServer(${s.id})">Stop</button></td></tr>`
    ).join('') || '<tr><td>No servers running</td></tr>';
  }

  async function stopServer(id){
    await fetch('/api/servers/' + id, {method: 'DELETE'});
    refreshServers(); refreshPorts(true);
  }

  document.getElementById('rescan').onclick = () => refreshPorts(true);
  document.getElementById('stop-all').onclick = async () => {
    await fetch('/api/servers/stop_all', {method: 'POST'});
    refreshServers(); refreshPorts(true);
  };
  document.getElementById('serve').onsubmit = async (ev) => {
    ev.preventDefault();
    const f = ev.target;
    const body = {directory: f.directory.value, port: f.port.value, exposeToLAN: f.exposeToLAN.checked};
    if (body.exposeToLAN && !confirm(`Any device on this LAN can access this folder. Start LAN server?`)) return;
    const r = await fetch('/api/servers', {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body)});
    if (!r.ok) { alert('Failed to start server: ' + (await r.json()).error); }
    refreshServers(); refreshPorts(true);
  };

  setInterval(refreshPorts, 3000);
  refreshPorts(false);
  refreshServers();
  </script>
</body>
</html>
"""

def render_html(default_port: int, lan_default: bool) -> str:
    html = HTML.replace("__DEFAULT_PORT__", str(default_port))
    return html.replace("__LAN_CHECKED__", "checked" if lan_default else "")
