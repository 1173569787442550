"""Built-in catalog of unsafe MongoDB query patterns.

Rules are plain data: a line-level regex plus remediation metadata. Order
matters: when several rules match the same line, findings are reported in
the order rules appear in ``ALL_RULES``.

This module embeds every unsafe example verbatim, so the scan engine skips
it by name (see ``CATALOG_SOURCE_NAMES``).
"""

from __future__ import annotations

from typing import Optional, Tuple

from safemongo.rules.models import Rule, validate_catalog

CATALOG_MODULE = __name__
CATALOG_SOURCE_NAMES = ("unsafe_queries.py", "unsafe_queries.pyc")

_DOCS = "https://www.mongodb.com/docs/manual"
_INJECTION_FAQ = (
    f"{_DOCS}/faq/fundamentals/#how-does-mongodb-address-sql-or-query-injection"
)
_INPUT_VALIDATION = f"{_DOCS}/core/security-input-validation/"
_FIND_SECURITY = f"{_DOCS}/reference/method/db.collection.find/#security"
_TX_ERRORS = f"{_DOCS}/core/transactions-in-applications/#error-handling"

# ── injection ─────────────────────────────────────────────────────────────────

FUNCTION_PARAMETER_INJECTION = Rule(
    id="FUNCTION_PARAMETER_INJECTION",
    name="Function Parameter Injection",
    # Literal values (true/false/null/undefined/numbers) are not parameters.
    pattern=(
        r"\.(find|findOne|aggregate|update|delete)\s*\(\s*\{\s*[a-zA-Z0-9_]+\s*:\s*"
        r"(?!(?:true|false|null|undefined)\b|\d)(\w+)(?!\()"
    ),
    severity="high",
    category="injection",
    description=(
        "Using unvalidated function parameters directly in queries can lead to "
        "query injection attacks"
    ),
    remediation=(
        "Validate and sanitize all function parameters before using them in "
        "database queries. Consider using schema validation or type checking."
    ),
    unsafe_example="const getUser = (username) => db.users.find({ username: username });",
    safe_example=(
        "const getUser = (username) => {\n"
        "  if (typeof username !== 'string' || !username) throw new Error('Invalid username');\n"
        "  return db.users.find({ username });\n"
        "};"
    ),
    reference_url=_INPUT_VALIDATION,
)

TEMPLATE_STRING_INJECTION = Rule(
    id="TEMPLATE_STRING_INJECTION",
    name="Template String Injection",
    pattern=r"db\.[a-zA-Z0-9_]+\.(find|findOne|aggregate|update|delete)\s*\(\s*`.*?\$\{.*?\}.*?`",
    severity="high",
    category="injection",
    description=(
        "Using template literals with interpolated values in MongoDB queries can "
        "lead to injection attacks"
    ),
    remediation=(
        "Never use template literals to construct MongoDB queries. Use "
        "parameterized objects instead."
    ),
    unsafe_example='db.users.find(`{ username: "${username}" }`);',
    safe_example="db.users.find({ username: sanitizedUsername });",
    reference_url=_INJECTION_FAQ,
)

ARRAY_FILTER_INJECTION = Rule(
    id="ARRAY_FILTER_INJECTION",
    name="Array Filter Injection",
    pattern=r"\$\[\s*\w+\s*\]",
    severity="medium",
    category="injection",
    description="Using unvalidated identifiers in array filters can lead to query injection",
    remediation=(
        "Validate array filter identifiers and ensure they only contain "
        "alphanumeric characters"
    ),
    unsafe_example="db.collection.updateOne({}, { $set: { 'items.$[userInput]': newValue } });",
    safe_example=(
        "const filterId = /^[a-zA-Z0-9]+$/.test(userInput) ? userInput : 'default';\n"
        "db.collection.updateOne({}, { $set: { [`items.$[${filterId}]`]: newValue } });"
    ),
    reference_url=f"{_DOCS}/reference/operator/update/positional-filtered/",
)

DIRECT_QUERY_VARIABLE_ASSIGNMENT = Rule(
    id="DIRECT_QUERY_VARIABLE_ASSIGNMENT",
    name="Direct Query Variable Assignment",
    pattern=r"const\s+query\s*=\s*req\.(body|params|query)",
    severity="high",
    category="injection",
    description=(
        "Directly assigning request data to a query variable can lead to query injection"
    ),
    remediation=(
        "Never assign user input directly to query objects. Always construct "
        "queries with validated fields."
    ),
    unsafe_example="const query = req.query;\ndb.users.find(query);",
    safe_example=(
        "const { name, email } = validateUserInput(req.query);\n"
        "db.users.find({ name, email });"
    ),
    reference_url=_INPUT_VALIDATION,
)

BULK_OPERATION_INJECTION = Rule(
    id="BULK_OPERATION_INJECTION",
    name="Bulk Operation Injection",
    pattern=r"\.bulkWrite\s*\(\s*(\w+)(?!\()",
    severity="high",
    category="injection",
    description=(
        "Using unvalidated input in bulk operations can lead to mass data manipulation"
    ),
    remediation="Validate each operation in a bulk write array before execution",
    unsafe_example="db.collection.bulkWrite(userOperations);",
    safe_example=(
        "const validatedOps = validateBulkOperations(userOperations);\n"
        "if (validatedOps) db.collection.bulkWrite(validatedOps);"
    ),
    reference_url=f"{_DOCS}/reference/method/db.collection.bulkWrite/",
)

EVAL_USAGE = Rule(
    id="EVAL_USAGE",
    name="Eval Usage",
    pattern=r"db\.eval\s*\(",
    severity="high",
    category="injection",
    description=(
        "Using db.eval() is deprecated and extremely dangerous as it allows "
        "arbitrary JavaScript execution"
    ),
    remediation=(
        "Never use db.eval(). Use aggregation framework or other MongoDB "
        "features instead."
    ),
    unsafe_example="db.eval('function() { return db.users.findOne(); }');",
    safe_example="db.users.findOne();",
    reference_url=f"{_DOCS}/reference/method/db.eval/#security",
)

# ── auth ──────────────────────────────────────────────────────────────────────

INSECURE_AUTH_CHECKS = Rule(
    id="INSECURE_AUTH_CHECKS",
    name="Insecure Authentication Checks",
    pattern=r"\.(find|findOne)\s*\(\s*\{\s*.*?password.*?\}\s*\)",
    severity="high",
    category="auth",
    description=(
        "Performing authentication through find operations can expose passwords "
        "or allow bypass"
    ),
    remediation=(
        "Use secure authentication mechanisms like Passport.js or MongoDB's "
        "built-in auth. Never query passwords directly."
    ),
    unsafe_example="db.users.findOne({ username, password: plainTextPassword });",
    safe_example=(
        "const user = await db.users.findOne({ username });\n"
        "const isMatch = await bcrypt.compare(password, user.passwordHash);"
    ),
    reference_url=f"{_DOCS}/core/security-scram/",
)

# ── schema ────────────────────────────────────────────────────────────────────

WEAK_INDEXING = Rule(
    id="WEAK_INDEXING",
    name="Weak Indexing",
    pattern=r"createIndex\s*\(\s*\{\s*.*?\s*\}\s*,\s*\{\s*(?!.*?unique).*?\}\s*\)",
    severity="medium",
    category="schema",
    description=(
        "Not using unique indexes for identity fields can lead to duplicate "
        "records and security issues"
    ),
    remediation=(
        "Use unique indexes for identity fields like username, email, and "
        "account numbers"
    ),
    unsafe_example="db.users.createIndex({ email: 1 }, { sparse: true });",
    safe_example="db.users.createIndex({ email: 1 }, { unique: true });",
    reference_url=f"{_DOCS}/core/index-unique/",
)

DIRECT_JSON_PARSE = Rule(
    id="DIRECT_JSON_PARSE",
    name="Direct JSON Parse to Query",
    pattern=r"JSON\.parse\s*\(.*?\)\s*.*?(\.find|\.findOne|\.update|\.delete)",
    severity="high",
    category="injection",
    description=(
        "Parsing JSON directly from external sources into queries can lead to "
        "injection attacks"
    ),
    remediation="Validate parsed JSON against a schema before using it in database operations",
    unsafe_example="const filter = JSON.parse(queryString); db.users.find(filter);",
    safe_example=(
        "const parsedData = JSON.parse(queryString);\n"
        "const validatedQuery = validateQuerySchema(parsedData);\n"
        "db.users.find(validatedQuery);"
    ),
    reference_url=_INJECTION_FAQ,
)

# ── error handling ────────────────────────────────────────────────────────────

TRANSACTION_WITHOUT_ERROR_HANDLING = Rule(
    id="TRANSACTION_WITHOUT_ERROR_HANDLING",
    name="Transaction Without Error Handling",
    pattern=r"startSession\s*\(\s*\).*?withTransaction.*?(?!\s*catch\s*\()",
    severity="medium",
    category="error-handling",
    description=(
        "MongoDB transactions without proper error handling can leave data in an "
        "inconsistent state"
    ),
    remediation=(
        "Always use try/catch/finally blocks with transactions and implement "
        "proper error handling"
    ),
    unsafe_example="client.startSession().withTransaction(() => { /* operations */ });",
    safe_example=(
        "try {\n"
        "  await session.withTransaction(async () => { /* operations */ });\n"
        "} catch (error) {\n"
        "  // Handle error and rollback if needed\n"
        "} finally {\n"
        "  await session.endSession();\n"
        "}"
    ),
    reference_url=_TX_ERRORS,
)

# ── injection (operators / strings) ───────────────────────────────────────────

NOSQL_INJECTION_OBJECT = Rule(
    id="NOSQL_INJECTION_OBJECT",
    name="NoSQL Injection (Object)",
    pattern=r"\{\s*(\$where|\$expr)\s*:",
    severity="high",
    category="injection",
    description=(
        "Using $where or $expr operators can lead to NoSQL injection if user "
        "input is not properly sanitized"
    ),
    remediation=(
        "Validate and sanitize all user inputs. Avoid using $where or $expr with "
        "user input. Use specific field queries instead."
    ),
    unsafe_example="""db.users.find({ $where: "this.username === '" + username + "'" });""",
    safe_example="db.users.find({ username: sanitizedUsername });",
    reference_url=f"{_DOCS}/reference/operator/query/where/#security",
)

NOSQL_INJECTION_REGEX = Rule(
    id="NOSQL_INJECTION_REGEX",
    name="NoSQL Injection (Regex)",
    pattern=r"""\{\s*['"a-zA-Z0-9_]+\s*:\s*new\s+RegExp\s*\(\s*.*?\s*\)""",
    severity="high",
    category="injection",
    description=(
        "Using RegExp with user input can lead to regex injection attacks or "
        "denial of service (ReDoS)"
    ),
    remediation=(
        "Validate the user input and ensure it doesn't contain regex special "
        "characters. Consider using exact matches instead."
    ),
    unsafe_example="db.users.find({ username: new RegExp(userInput) });",
    safe_example="db.users.find({ username: sanitizedUsername });",
    reference_url=f"{_DOCS}/reference/operator/query/regex/#security",
)

NOSQL_INJECTION_STRING = Rule(
    id="NOSQL_INJECTION_STRING",
    name="NoSQL Injection (String Concatenation)",
    pattern=(
        r"""db\.[a-zA-Z0-9_]+\.(find|findOne|aggregate|update|delete)\s*\(\s*['"`]"""
        r"""\s*\{\s*.*?\$.*?\}\s*['"`]\s*\+"""
    ),
    severity="high",
    category="injection",
    description="String concatenation to build query objects can lead to NoSQL injection",
    remediation=(
        "Never construct MongoDB queries using string concatenation. Use "
        "parameterized queries with proper objects."
    ),
    unsafe_example="""db.users.find("{ role: { $ne: 'admin' } }" + filterSuffix);""",
    safe_example="db.users.find({ username: sanitizedUsername });",
    reference_url=_INJECTION_FAQ,
)

UNVALIDATED_USER_INPUT = Rule(
    id="UNVALIDATED_USER_INPUT",
    name="Unvalidated User Input in Query",
    pattern=r"""\{\s*['"a-zA-Z0-9_]+\s*:\s*req\.body\.|req\.params\.|req\.query\.""",
    severity="high",
    category="injection",
    description=(
        "Using unvalidated user input directly in queries can lead to NoSQL "
        "injection attacks"
    ),
    remediation=(
        "Always validate and sanitize user input before using it in database "
        "queries. Use validation libraries like Zod or Joi."
    ),
    unsafe_example="db.users.find({ username: req.body.username });",
    safe_example=(
        "const schema = z.object({ username: z.string() });\n"
        "const { username } = schema.parse(req.body);\n"
        "db.users.find({ username });"
    ),
    reference_url=_INPUT_VALIDATION,
)

# ── exposure ──────────────────────────────────────────────────────────────────

INSECURE_PROJECTION = Rule(
    id="INSECURE_PROJECTION",
    name="Insecure Projection",
    pattern=(
        r"""\.(find|findOne)\s*\(\s*.*?\s*,\s*\{\s*"""
        r"""(['"a-zA-Z0-9_]+\s*:\s*0|['"a-zA-Z0-9_]+\s*:\s*false)\s*\}"""
    ),
    severity="medium",
    category="exposure",
    description=(
        "Excluding fields in projection (using 0 or false) can unintentionally "
        "expose sensitive data"
    ),
    remediation=(
        "Use positive projections (inclusion with 1) instead of negative "
        "projections (exclusion with 0) to explicitly specify which fields to return."
    ),
    unsafe_example="db.users.find({}, { password: 0 });",
    safe_example="db.users.find({}, { username: 1, email: 1 });",
    reference_url=f"{_DOCS}/reference/operator/projection/positional/#security",
)

INSECURE_AGGREGATION = Rule(
    id="INSECURE_AGGREGATION",
    name="Insecure Aggregation Pipeline",
    pattern=(
        r"\.aggregate\s*\(\s*\[\s*\{\s*\$project\s*:\s*\{.*?"
        r"(\$literal|\$eval|\$function).*?\}\s*\}"
    ),
    severity="high",
    category="injection",
    description=(
        "Using operators like $literal, $eval, or $function in aggregation "
        "pipelines with user input can lead to code injection"
    ),
    remediation=(
        "Avoid using $literal, $eval, or $function operators with user input. "
        "Validate and sanitize all input used in aggregation pipelines."
    ),
    unsafe_example="db.users.aggregate([{ $project: { computed: { $eval: userInput } } }]);",
    safe_example='db.users.aggregate([{ $project: { computed: { $sum: ["$field1", "$field2"] } } }]);',
    reference_url=f"{_DOCS}/reference/operator/aggregation/project/#security",
)

UNCONSTRAINED_QUERY = Rule(
    id="UNCONSTRAINED_QUERY",
    name="Unconstrained Query",
    pattern=r"\.(find|findOne|update|delete)\s*\(\s*\{\s*\}\s*\)",
    severity="medium",
    category="exposure",
    description=(
        "Querying without constraints can lead to retrieving or modifying all "
        "documents, potentially leaking sensitive data"
    ),
    remediation="Always use specific query criteria to limit the scope of database operations.",
    unsafe_example="db.users.find({});",
    safe_example='db.users.find({ active: true, role: "user" });',
    reference_url=_FIND_SECURITY,
)

MASS_ASSIGNMENT = Rule(
    id="MASS_ASSIGNMENT",
    name="Mass Assignment Vulnerability",
    pattern=(
        r"\.(insertOne|insertMany|updateOne|updateMany|findOneAndUpdate)\s*\(\s*.*?,"
        r"\s*\{\s*\$set\s*:\s*req\.body\s*\}"
    ),
    severity="high",
    category="injection",
    description=(
        "Using the entire request body in updates can lead to mass assignment "
        "vulnerabilities"
    ),
    remediation=(
        "Explicitly select which fields from the request body should be updated. "
        "Never use the entire req.body object directly."
    ),
    unsafe_example="db.users.updateOne({ _id }, { $set: req.body });",
    safe_example=(
        "const { name, email } = req.body;\n"
        "db.users.updateOne({ _id }, { $set: { name, email } });"
    ),
    reference_url=_INPUT_VALIDATION,
)

# ── denial of service ─────────────────────────────────────────────────────────

INSECURE_INDEXING = Rule(
    id="INSECURE_INDEXING",
    name="Insecure Text Indexing",
    pattern=r"""createIndex\s*\(\s*\{\s*.*?:\s*['"]text['"]\s*\}""",
    severity="medium",
    category="dos",
    description=(
        "Text indices can be resource-intensive and susceptible to DoS attacks "
        "if not properly secured"
    ),
    remediation=(
        "Limit text search queries, apply rate limiting, and ensure indices are "
        "created on specific fields only."
    ),
    unsafe_example='db.collection.createIndex({ content: "text" });',
    safe_example=(
        'db.collection.createIndex({ title: "text" }, '
        '{ weights: { title: 10 }, default_language: "english" });'
    ),
    reference_url=f"{_DOCS}/core/text-search-languages/#security",
)

UNAUTHORIZED_SCHEMA_MODIFICATION = Rule(
    id="UNAUTHORIZED_SCHEMA_MODIFICATION",
    name="Unauthorized Schema Modification",
    pattern=r"\.(createCollection|dropCollection|createIndex|dropIndex)\s*\(",
    severity="medium",
    category="schema",
    description=(
        "Schema modification operations should be restricted to administrative "
        "functions only"
    ),
    remediation=(
        "Implement proper role-based access control for schema-modifying "
        "operations. Consider using migration scripts instead of runtime modifications."
    ),
    unsafe_example='db.createCollection("newCollection");',
    safe_example=(
        "// Use a migration framework or limit this operation to admin routes "
        "with proper authorization"
    ),
    reference_url=f"{_DOCS}/core/security-operations/#security",
)

INSECURE_OPERATOR_USAGE = Rule(
    id="INSECURE_OPERATOR_USAGE",
    name="Insecure Operator Usage",
    pattern=r"""\{\s*\$ne\s*:|"\$ne"\s*:|'\$ne'\s*:""",
    severity="high",
    category="auth",
    description="Using $ne operator can lead to authentication bypass if not properly secured",
    remediation=(
        "Be cautious when using negation operators. Ensure proper authentication "
        "checks and input validation."
    ),
    unsafe_example='db.users.find({ username: username, password: { $ne: "" } });',
    safe_example="db.users.findOne({ username, password: hashedPassword });",
    reference_url=f"{_DOCS}/reference/operator/query/ne/#security",
)

UNVALIDATED_ID = Rule(
    id="UNVALIDATED_ID",
    name="Unvalidated MongoDB ObjectId",
    pattern=r"(?<!isValid\()new\s+ObjectId\s*\(\s*.*?req\.(body|params|query)",
    severity="medium",
    category="injection",
    description="Using unvalidated input as ObjectId can cause errors or unexpected behavior",
    remediation=(
        "Validate that the input is a valid ObjectId format before creating a "
        "new ObjectId."
    ),
    unsafe_example="db.users.findOne({ _id: new ObjectId(req.params.id) });",
    safe_example=(
        "if (ObjectId.isValid(req.params.id)) {\n"
        "  db.users.findOne({ _id: new ObjectId(req.params.id) });\n"
        "}"
    ),
    reference_url=f"{_DOCS}/reference/method/ObjectId/#security",
)

PROJECTION_INJECTION = Rule(
    id="PROJECTION_INJECTION",
    name="Projection Injection",
    pattern=r"\.(find|findOne)\s*\(\s*.*?\s*,\s*req\.(body|params|query)",
    severity="high",
    category="injection",
    description=(
        "Using user input directly in the projection parameter can lead to "
        "information disclosure"
    ),
    remediation="Validate and sanitize projection fields. Only allow a whitelist of permitted fields.",
    unsafe_example="db.users.find({}, req.query.fields);",
    safe_example=(
        'const allowedFields = ["name", "email", "createdAt"];\n'
        "const projection = {};\n"
        "for (const field of allowedFields) {\n"
        "  if (req.query.fields.includes(field)) projection[field] = 1;\n"
        "}\n"
        "db.users.find({}, projection);"
    ),
    reference_url=f"{_DOCS}/reference/operator/projection/positional/#security",
)

UNCONTROLLED_LIMIT = Rule(
    id="UNCONTROLLED_LIMIT",
    name="Uncontrolled Query Limit",
    pattern=r"\.limit\s*\(\s*req\.(body|params|query)",
    severity="medium",
    category="dos",
    description="Using unvalidated user input for limit can lead to denial of service",
    remediation="Apply reasonable upper and lower bounds to limit values from user input.",
    unsafe_example="db.users.find({}).limit(req.query.limit);",
    safe_example=(
        "const limit = Math.min(Math.max(parseInt(req.query.limit) || 10, 1), 100);\n"
        "db.users.find({}).limit(limit);"
    ),
    reference_url=_FIND_SECURITY,
)

SORT_INJECTION = Rule(
    id="SORT_INJECTION",
    name="Sort Injection",
    pattern=r"\.sort\s*\(\s*req\.(body|params|query)",
    severity="medium",
    category="dos",
    description="Using unvalidated sort parameters can lead to performance issues or DoS",
    remediation="Validate sort fields and directions. Only allow sorting on indexed fields.",
    unsafe_example="db.users.find({}).sort(req.query.sort);",
    safe_example=(
        'const allowedSortFields = ["name", "createdAt"];\n'
        "const sortField = allowedSortFields.includes(req.query.sortField) "
        '? req.query.sortField : "createdAt";\n'
        'const sortDir = req.query.sortDir === "desc" ? -1 : 1;\n'
        "db.users.find({}).sort({ [sortField]: sortDir });"
    ),
    reference_url=_FIND_SECURITY,
)

OBJECT_SPREAD_INJECTION = Rule(
    id="OBJECT_SPREAD_INJECTION",
    name="Object Spread Injection",
    pattern=r"\.(find|findOne|aggregate|update|delete)\s*\(\s*\{\s*.*?,?\s*\.\.\.(\w+).*?\}",
    severity="high",
    category="injection",
    description=(
        "Spreading objects directly into MongoDB queries can lead to query "
        "injection if the spread object is untrusted"
    ),
    remediation=(
        "Explicitly select only the required fields from the object instead of "
        "spreading the entire object into the query"
    ),
    unsafe_example="db.collection.find({ field: value, ...userProvidedObject });",
    safe_example=(
        "const { safeField1, safeField2 } = userProvidedObject;\n"
        "db.collection.find({ field: value, safeField1, safeField2 });"
    ),
    reference_url=f"{_DOCS}/reference/operator/query/positional/#security",
)

DYNAMIC_OPERATOR_ASSIGNMENT = Rule(
    id="DYNAMIC_OPERATOR_ASSIGNMENT",
    name="Dynamic Operator Assignment",
    pattern=r"\w+\s*=\s*\{\s*\$\w+:",
    severity="medium",
    category="injection",
    description=(
        "Dynamically assigning MongoDB operators like $in, $gte, $lte to query "
        "fields can lead to operator injection attacks"
    ),
    remediation="Validate both the operators and values before assigning them to query properties",
    unsafe_example="query.field = { $in: userProvidedArray }; // Or query._id = { $gte: someValue };",
    safe_example=(
        "if (Array.isArray(allowedValues) && allowedValues.every(v => typeof v === 'string')) {\n"
        "  query.field = { $in: allowedValues };\n"
        "}"
    ),
    reference_url=f"{_DOCS}/reference/operator/query/positional/#security",
)

# ── error handling (line-local heuristics) ────────────────────────────────────

MONGOOSE_QUERY_EXEC_MISSING = Rule(
    id="MONGOOSE_QUERY_EXEC_MISSING",
    name="Mongoose Query Exec Missing",
    # Line-local: cannot see an .exec() chained on a following line.
    pattern=(
        r"\.(find|findOne|findById|update|delete|count)"
        r"(?!\s*\(\s*\)|\s*\(\s*.*?\s*\)\s*\.(exec|then|catch)\b)"
    ),
    severity="low",
    category="error-handling",
    description=(
        "Not calling .exec() or not using a callback/Promise with Mongoose "
        "queries can lead to unexpected behavior"
    ),
    remediation=(
        "Always use .exec() or a callback/Promise with Mongoose queries to "
        "ensure proper error handling"
    ),
    unsafe_example="const users = User.find({ active: true });",
    safe_example="const users = await User.find({ active: true }).exec();",
    reference_url=_FIND_SECURITY,
)

UNHANDLED_PROMISE_REJECTION = Rule(
    id="UNHANDLED_PROMISE_REJECTION",
    name="Unhandled Promise Rejection",
    # Line-local: an enclosing try block on another line is invisible here.
    pattern=(
        r"await\s+(\w+\.)*(find|findOne|findById|update|delete|aggregate|count)"
        r".*?(?!\s*try\s*\{)"
    ),
    severity="medium",
    category="error-handling",
    description=(
        "MongoDB operations without proper try/catch blocks can lead to "
        "unhandled promise rejections"
    ),
    remediation="Always wrap MongoDB operations in try/catch blocks to handle errors properly",
    unsafe_example="const users = await User.find({ active: true });",
    safe_example=(
        "try {\n"
        "  const users = await db.collection('users').find().toArray();\n"
        "} catch (error) {\n"
        "  // Handle error\n"
        "}"
    ),
    reference_url=_TX_ERRORS,
)

UNESCAPED_REGEX_INPUT = Rule(
    id="UNESCAPED_REGEX_INPUT",
    name="Unescaped Regex Input",
    pattern=r"""\{\s*['"a-zA-Z0-9_]+\s*:\s*\{\s*\$regex\s*:\s*(\w+)(?!\()""",
    severity="high",
    category="injection",
    description="Using unescaped user input in $regex queries can lead to regex injection attacks",
    remediation="Escape special regex characters in user input before using in $regex queries",
    unsafe_example="db.users.find({ username: { $regex: userInput } });",
    safe_example=(
        r"const escapedInput = userInput.replace(/[.*+?^${}()|[\]\\]/g, '\\$&');"
        "\n"
        "db.users.find({ username: { $regex: escapedInput } });"
    ),
    reference_url=f"{_DOCS}/reference/operator/query/regex/#security",
)

SENSITIVE_FIELD_EXPOSURE = Rule(
    id="SENSITIVE_FIELD_EXPOSURE",
    name="Sensitive Field Exposure",
    pattern=r"\.\s*find.*\{\s*\}\s*(?!.*\{\s*password\s*:\s*0|\s*passwordHash\s*:\s*0)",
    severity="high",
    category="exposure",
    description=(
        "Querying without explicitly excluding sensitive fields can expose "
        "passwords and other confidential data"
    ),
    remediation=(
        "Always exclude sensitive fields like passwords or use explicit "
        "projection to include only necessary fields"
    ),
    unsafe_example="db.users.find({});",
    safe_example=(
        "db.users.find({}, { password: 0, passwordHash: 0 });\n"
        "// Or better: db.users.find({}, { username: 1, email: 1 });"
    ),
    reference_url=_FIND_SECURITY,
)

UNCONTROLLED_SKIP = Rule(
    id="UNCONTROLLED_SKIP",
    name="Uncontrolled Skip Value",
    pattern=r"\.skip\s*\(\s*req\.(body|params|query)",
    severity="medium",
    category="dos",
    description="Using unvalidated user input for skip can lead to performance issues or DoS",
    remediation="Apply reasonable upper and lower bounds to skip values from user input",
    unsafe_example="db.users.find().skip(req.query.skip);",
    safe_example=(
        "const skip = Math.min(Math.max(parseInt(req.query.skip) || 0, 0), 1000);\n"
        "db.users.find().skip(skip);"
    ),
    reference_url=_FIND_SECURITY,
)

SECRETS_IN_QUERY = Rule(
    id="SECRETS_IN_QUERY",
    name="Secrets in Query",
    pattern=(
        r"(api[_-]?key|secret|password|token|auth[_-]?token|credential)"
        r"[^\n]{1,30}(=|:)[^\n]{1,30}"
    ),
    severity="high",
    category="exposure",
    description=(
        "Hardcoded secrets or credentials in database queries can lead to "
        "security breaches"
    ),
    remediation=(
        "Never hardcode secrets in queries. Use environment variables or secure "
        "secret management"
    ),
    unsafe_example="const apiKey = 'sk_live_123456789abcdef'; db.users.find({ apiKey });",
    safe_example="db.users.find({ apiKey: process.env.API_KEY });",
    reference_url=_INPUT_VALIDATION,
)

DANGEROUS_PROJECTION = Rule(
    id="DANGEROUS_PROJECTION",
    name="Dangerous Projection Operators",
    pattern=r"\$\s*:\s*(\{|\[|\$)",
    severity="high",
    category="exposure",
    description="Using the $ projection operator with untrusted input can lead to data exposure",
    remediation="Avoid using the $ operator in projections with user input",
    unsafe_example="db.users.find({}, { $: { $elemMatch: userInput } });",
    safe_example="// Use explicit field projections instead",
    reference_url=f"{_DOCS}/reference/operator/projection/positional/#security",
)

UNVALIDATED_UPDATE_OPERATORS = Rule(
    id="UNVALIDATED_UPDATE_OPERATORS",
    name="Unvalidated Update Operators",
    pattern=r"\.\s*(update|updateOne|updateMany|findOneAndUpdate)\s*\(\s*.*?,\s*\{\s*\$\w+\s*:",
    severity="high",
    category="injection",
    description=(
        "Using update operators like $set, $unset, $inc without validation can "
        "allow field manipulation attacks"
    ),
    remediation="Validate update operators and fields before executing update operations",
    unsafe_example="db.users.updateOne({ _id }, { $set: userUpdate });",
    safe_example=(
        "const allowedFields = ['name', 'email'];\n"
        "const update = {};\n"
        "for (const [key, value] of Object.entries(req.body)) {\n"
        "  if (allowedFields.includes(key)) update[key] = value;\n"
        "}\n"
        "db.users.updateOne({ _id }, { $set: update });"
    ),
    reference_url=_INPUT_VALIDATION,
)

ALL_RULES: Tuple[Rule, ...] = validate_catalog([
    FUNCTION_PARAMETER_INJECTION,
    TEMPLATE_STRING_INJECTION,
    ARRAY_FILTER_INJECTION,
    DIRECT_QUERY_VARIABLE_ASSIGNMENT,
    BULK_OPERATION_INJECTION,
    EVAL_USAGE,
    INSECURE_AUTH_CHECKS,
    WEAK_INDEXING,
    DIRECT_JSON_PARSE,
    TRANSACTION_WITHOUT_ERROR_HANDLING,
    NOSQL_INJECTION_OBJECT,
    NOSQL_INJECTION_REGEX,
    NOSQL_INJECTION_STRING,
    UNVALIDATED_USER_INPUT,
    INSECURE_PROJECTION,
    INSECURE_AGGREGATION,
    UNCONSTRAINED_QUERY,
    MASS_ASSIGNMENT,
    INSECURE_INDEXING,
    UNAUTHORIZED_SCHEMA_MODIFICATION,
    INSECURE_OPERATOR_USAGE,
    UNVALIDATED_ID,
    PROJECTION_INJECTION,
    UNCONTROLLED_LIMIT,
    SORT_INJECTION,
    OBJECT_SPREAD_INJECTION,
    DYNAMIC_OPERATOR_ASSIGNMENT,
    MONGOOSE_QUERY_EXEC_MISSING,
    UNHANDLED_PROMISE_REJECTION,
    UNESCAPED_REGEX_INPUT,
    SENSITIVE_FIELD_EXPOSURE,
    UNCONTROLLED_SKIP,
    SECRETS_IN_QUERY,
    DANGEROUS_PROJECTION,
    UNVALIDATED_UPDATE_OPERATORS,
])

_BY_ID = {rule.id: rule for rule in ALL_RULES}


def all_rules() -> Tuple[Rule, ...]:
    """Return the built-in catalog in registration order."""
    return ALL_RULES


def get_rule(rule_id: str) -> Optional[Rule]:
    return _BY_ID.get(rule_id)
