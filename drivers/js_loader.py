# ==============================================================================
# 注入页面的 JS 片段
# ==============================================================================
# 页面侧只做两件事：
#   1. 把 MutationObserver 的每次回调、每次站内跳转记录到 window.__spoiler_guard_events
#   2. 提供元素级的读写小片段 (通过 ele.run_js 执行，this 即当前元素)
# 匹配和遮罩判断全部在 Python 侧完成
# ==============================================================================

import json

# 遮罩层样式，保证完全盖住缩略图
OVERLAY_STYLE = {
    "position": "absolute",
    "top": "0",
    "left": "0",
    "width": "100%",
    "height": "100%",
    "backgroundColor": "black",
    "zIndex": "10",  # 压在图片上面
    "display": "flex",
    "alignItems": "center",
    "justifyContent": "center",
    "color": "white",
    "fontSize": "1.5em",
    "fontWeight": "bold",
    "textAlign": "center",
}

OVERLAY_STYLE_JSON = json.dumps(OVERLAY_STYLE)

# arguments[0] = 站内跳转事件名 (可为空)
CHANGE_FEED_INSTALL_JS = """
if (window.__spoiler_guard) { return 'exists'; }
// 文档还没有 body (刷新进行中)，交给下一次轮询重试
if (!document.body) { return 'no-body'; }
const navEvent = arguments[0];
window.__spoiler_guard_events = [];

// 每次回调就是一批变更，只统计增删数量，是否重扫由 Python 决定
const record = mutations => {
    if (!mutations.length) { return; }
    let added = 0;
    let removed = 0;
    mutations.forEach(m => {
        added += m.addedNodes.length;
        removed += m.removedNodes.length;
    });
    window.__spoiler_guard_events.push({type: 'mutation', added: added, removed: removed});
};
const observer = new MutationObserver(record);
observer.observe(document.body, {childList: true, subtree: true});

const onNavigate = () => {
    window.__spoiler_guard_events.push({type: 'navigate', name: navEvent});
};
if (navEvent) {
    window.addEventListener(navEvent, onNavigate);
}

// 遮罩自身的写入不进入队列：先把已有记录照常入队，写完后丢弃本次产生的记录
const quiet = fn => {
    record(observer.takeRecords());
    try {
        return fn();
    } finally {
        observer.takeRecords();
    }
};

window.__spoiler_guard = {observer: observer, navEvent: navEvent, onNavigate: onNavigate, quiet: quiet};
return 'installed';
"""

# 返回 null 表示监听器不存在 (整页刷新后 window 被重置)
CHANGE_FEED_DRAIN_JS = """
if (!window.__spoiler_guard) { return null; }
const events = window.__spoiler_guard_events || [];
window.__spoiler_guard_events = [];
return JSON.stringify(events);
"""

CHANGE_FEED_UNINSTALL_JS = """
const g = window.__spoiler_guard;
if (!g) { return; }
g.observer.disconnect();
if (g.navEvent) {
    window.removeEventListener(g.navEvent, g.onNavigate);
}
delete window.__spoiler_guard;
delete window.__spoiler_guard_events;
"""

# ================= 元素级片段 (this = 当前元素) =================


def _quiet(body: str) -> str:
    """写操作包进 quiet()，箭头函数沿用外层的 this 和 arguments"""
    return (
        "const g = window.__spoiler_guard;\n"
        "const apply = () => {\n" + body.strip() + "\n};\n"
        "if (g) { g.quiet(apply); } else { apply(); }\n"
    )


TEXT_CONTENT_JS = "return this.textContent;"

SET_TEXT_CONTENT_JS = _quiet("this.textContent = arguments[0];")

COMPUTED_POSITION_JS = "return window.getComputedStyle(this).position;"

SET_POSITION_JS = _quiet("this.style.position = arguments[0];")

# arguments: [overlay class, 遮罩文字, 样式 JSON]
APPEND_OVERLAY_JS = _quiet("""
const overlay = document.createElement('div');
overlay.classList.add(arguments[0]);
Object.assign(overlay.style, JSON.parse(arguments[2]));
overlay.textContent = arguments[1];
this.appendChild(overlay);
""")
