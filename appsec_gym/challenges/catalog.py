"""Built-in challenge catalog.

Each challenge ships its vulnerable snippet, progressive hints and the
attack it defends against. Order matters: it is the training order used by
``next``.
"""

from typing import Optional

from appsec_gym.models.challenge import Challenge, Difficulty, FileSpec

MAIN_FILE = "vulnerable.js"


SQL_INJECTION_BASIC = Challenge(
    id="sql-injection-basic",
    title="Basic SQL Injection",
    category="injection",
    difficulty=Difficulty.BEGINNER,
    description="Fix a login function vulnerable to SQL injection",
    files=[FileSpec(name=MAIN_FILE, content="""\
// TODO: Fix the SQL injection vulnerability in this login function
const mysql = require('mysql');

function login(username, password) {
  // VULNERABILITY: User input is directly concatenated into SQL query
  const query = "SELECT * FROM users WHERE username = '" + username +
                "' AND password = '" + password + "'";

  return db.query(query);
}

module.exports = { login };
""")],
    hints=[
        "Look for where user input (username and password) is being concatenated directly into the SQL query.",
        "Consider using parameterized queries with ? placeholders instead of string concatenation.",
        'Example: db.query("SELECT * FROM users WHERE username = ? AND password = ?", [username, password])',
    ],
    learning_objectives=[
        "Recognise SQL built from string concatenation",
        "Use parameterized queries to keep data out of the query structure",
    ],
    attack_vectors=["Username: admin' --  Password: anything"],
)

XSS_STORED = Challenge(
    id="xss-stored",
    title="Stored XSS in Comments",
    category="xss",
    difficulty=Difficulty.BEGINNER,
    description="Sanitize user comments to prevent XSS attacks",
    files=[FileSpec(name=MAIN_FILE, content="""\
// TODO: Fix the XSS vulnerability in this comment handler
function displayComment(comment) {
  // VULNERABILITY: User input is rendered without sanitization
  document.getElementById('comments').innerHTML +=
    '<div class="comment">' + comment.text + '</div>';
}

module.exports = { displayComment };
""")],
    hints=[
        "The vulnerability is in how the comment text is added to the page.",
        "innerHTML interprets HTML tags. Consider using textContent instead.",
        "textContent treats everything as plain text, preventing script execution.",
    ],
    learning_objectives=["Render untrusted text without interpreting it as HTML"],
    attack_vectors=['<img src=x onerror="alert(document.cookie)">'],
)

JWT_WEAK_SECRET = Challenge(
    id="jwt-weak-secret",
    title="Weak JWT Secret",
    category="auth",
    difficulty=Difficulty.INTERMEDIATE,
    description="Fix JWT implementation with weak secret",
    files=[FileSpec(name=MAIN_FILE, content="""\
// TODO: Fix the weak JWT secret vulnerability
const jwt = require('jsonwebtoken');

// VULNERABILITY: Hardcoded weak secret
const SECRET = 'secret123';

function createToken(userId) {
  return jwt.sign({ userId }, SECRET, { expiresIn: '1h' });
}

function verifyToken(token) {
  return jwt.verify(token, SECRET);
}

module.exports = { createToken, verifyToken };
""")],
    hints=[
        "The secret should not be hardcoded in the source code.",
        "Use process.env to read the secret from environment variables.",
        "Example: const SECRET = process.env.JWT_SECRET || crypto.randomBytes(64).toString('hex')",
    ],
    learning_objectives=["Keep signing secrets out of source control"],
    attack_vectors=["Brute-force the HS256 secret offline and forge an admin token"],
)

PATH_TRAVERSAL = Challenge(
    id="path-traversal",
    title="Path Traversal in File Server",
    category="path-traversal",
    difficulty=Difficulty.INTERMEDIATE,
    description="Prevent directory traversal attacks",
    files=[FileSpec(name=MAIN_FILE, content="""\
// TODO: Fix the path traversal vulnerability in this file server
const fs = require('fs');
const path = require('path');

const PUBLIC_DIR = path.join(__dirname, 'public');

function serveFile(filename) {
  // VULNERABILITY: The requested name is joined without any containment check
  const filePath = path.join(PUBLIC_DIR, filename);
  return fs.readFileSync(filePath, 'utf8');
}

module.exports = { serveFile };
""")],
    hints=[
        "What happens if filename is '../../etc/passwd'?",
        "Resolve the final path and make sure it still starts with PUBLIC_DIR.",
        "Example: const safe = path.resolve(PUBLIC_DIR, path.basename(filename)); if (!safe.startsWith(PUBLIC_DIR)) throw ...",
    ],
    learning_objectives=["Confine file access to an intended base directory"],
    attack_vectors=["GET /files?name=../../etc/passwd"],
)

XXE_PARSER = Challenge(
    id="xxe-parser",
    title="XXE in XML Parser",
    category="xxe",
    difficulty=Difficulty.ADVANCED,
    description="Secure XML parsing against XXE attacks",
    files=[FileSpec(name=MAIN_FILE, content="""\
// TODO: Fix the XXE vulnerability in this XML import
const libxmljs = require('libxmljs');

function importProfile(xml) {
  // VULNERABILITY: External entities are expanded while parsing
  const doc = libxmljs.parseXml(xml, { noent: true });
  return doc.get('//name').text();
}

module.exports = { importProfile };
""")],
    hints=[
        "The parser option noent controls whether entities are substituted.",
        "Disable entity substitution so external entities are never resolved.",
        "Example: libxmljs.parseXml(xml, { noent: false, nonet: true })",
    ],
    learning_objectives=["Disable external entity resolution in XML parsers"],
    attack_vectors=['<!DOCTYPE x [<!ENTITY xxe SYSTEM "file:///etc/passwd">]><name>&xxe;</name>'],
)


CHALLENGES: list[Challenge] = [
    SQL_INJECTION_BASIC,
    XSS_STORED,
    JWT_WEAK_SECRET,
    PATH_TRAVERSAL,
    XXE_PARSER,
]


def get_all_challenges() -> list[Challenge]:
    return list(CHALLENGES)


def get_challenge(challenge_id: str) -> Optional[Challenge]:
    return next((c for c in CHALLENGES if c.id == challenge_id), None)


def next_challenge(challenge_id: str) -> Optional[Challenge]:
    """The challenge after ``challenge_id`` in training order, or None at the end."""
    ids = [c.id for c in CHALLENGES]
    if challenge_id not in ids:
        return None
    index = ids.index(challenge_id)
    if index == len(CHALLENGES) - 1:
        return None
    return CHALLENGES[index + 1]
