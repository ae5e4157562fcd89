# Declaration stubs for commonly imported packages, written as Go source.
# The importer type-checks these declarations like a vendored copy, so the
# analyzed package can resolve zap.NewNop(), fmt.Sprintf(...) and friends
# without a Go toolchain. Members missing here simply do not resolve.

STUB_SOURCES: dict[str, str] = {
    "go.uber.org/zap": """
package zap

type Field struct {
	Key    string
	String string
}

type Option interface {
	apply(*Logger)
}

type Config struct {
	Development bool
	Encoding    string
}

func (cfg Config) Build(opts ...Option) (*Logger, error)

type Logger struct {
	name string
}

func New(core interface{}, options ...Option) *Logger
func NewNop() *Logger
func NewProduction(options ...Option) (*Logger, error)
func NewDevelopment(options ...Option) (*Logger, error)
func NewExample(options ...Option) *Logger
func NewProductionConfig() Config
func NewDevelopmentConfig() Config
func Must(logger *Logger, err error) *Logger
func L() *Logger
func S() *SugaredLogger
func ReplaceGlobals(logger *Logger) func()

func (log *Logger) Debug(msg string, fields ...Field)
func (log *Logger) Info(msg string, fields ...Field)
func (log *Logger) Warn(msg string, fields ...Field)
func (log *Logger) Error(msg string, fields ...Field)
func (log *Logger) DPanic(msg string, fields ...Field)
func (log *Logger) Panic(msg string, fields ...Field)
func (log *Logger) Fatal(msg string, fields ...Field)
func (log *Logger) With(fields ...Field) *Logger
func (log *Logger) WithOptions(opts ...Option) *Logger
func (log *Logger) Named(s string) *Logger
func (log *Logger) Name() string
func (log *Logger) Sugar() *SugaredLogger
func (log *Logger) Sync() error

type SugaredLogger struct {
	base *Logger
}

func (s *SugaredLogger) Desugar() *Logger
func (s *SugaredLogger) With(args ...interface{}) *SugaredLogger
func (s *SugaredLogger) Named(name string) *SugaredLogger
func (s *SugaredLogger) Debug(args ...interface{})
func (s *SugaredLogger) Info(args ...interface{})
func (s *SugaredLogger) Warn(args ...interface{})
func (s *SugaredLogger) Error(args ...interface{})
func (s *SugaredLogger) Debugf(template string, args ...interface{})
func (s *SugaredLogger) Infof(template string, args ...interface{})
func (s *SugaredLogger) Warnf(template string, args ...interface{})
func (s *SugaredLogger) Errorf(template string, args ...interface{})
func (s *SugaredLogger) Debugw(msg string, keysAndValues ...interface{})
func (s *SugaredLogger) Infow(msg string, keysAndValues ...interface{})
func (s *SugaredLogger) Warnw(msg string, keysAndValues ...interface{})
func (s *SugaredLogger) Errorw(msg string, keysAndValues ...interface{})
func (s *SugaredLogger) Sync() error

func Any(key string, value interface{}) Field
func Bool(key string, val bool) Field
func ByteString(key string, val []byte) Field
func Duration(key string, val int64) Field
func Error(err error) Field
func Float64(key string, val float64) Field
func Int(key string, val int) Field
func Int64(key string, val int64) Field
func NamedError(key string, err error) Field
func Skip() Field
func Stack(key string) Field
func String(key string, val string) Field
func Strings(key string, ss []string) Field
func Uint(key string, val uint) Field
""",
    "fmt": """
package fmt

type Stringer interface {
	String() string
}

func Errorf(format string, a ...any) error
func Print(a ...any) (n int, err error)
func Printf(format string, a ...any) (n int, err error)
func Println(a ...any) (n int, err error)
func Sprint(a ...any) string
func Sprintf(format string, a ...any) string
func Sprintln(a ...any) string
func Sscanf(str string, format string, a ...any) (n int, err error)
""",
    "errors": """
package errors

func New(text string) error
func Is(err, target error) bool
func As(err error, target any) bool
func Unwrap(err error) error
func Join(errs ...error) error
""",
    "strings": """
package strings

type Builder struct {
	buf []byte
}

func (b *Builder) String() string
func (b *Builder) Len() int
func (b *Builder) Reset()
func (b *Builder) WriteString(s string) (int, error)
func (b *Builder) WriteByte(c byte) error

func Contains(s, substr string) bool
func HasPrefix(s, prefix string) bool
func HasSuffix(s, suffix string) bool
func Join(elems []string, sep string) string
func Repeat(s string, count int) string
func Replace(s, old, new string, n int) string
func ReplaceAll(s, old, new string) string
func Split(s, sep string) []string
func Title(s string) string
func ToLower(s string) string
func ToUpper(s string) string
func TrimPrefix(s, prefix string) string
func TrimSpace(s string) string
func TrimSuffix(s, suffix string) string
""",
    "strconv": """
package strconv

func Atoi(s string) (int, error)
func FormatInt(i int64, base int) string
func Itoa(i int) string
func ParseBool(str string) (bool, error)
func ParseInt(s string, base int, bitSize int) (int64, error)
func Quote(s string) string
""",
    "os": """
package os

var Args []string

func Exit(code int)
func Getenv(key string) string
func Getwd() (dir string, err error)
func Hostname() (name string, err error)
func LookupEnv(key string) (string, bool)
""",
}
